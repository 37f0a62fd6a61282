"""Shared fixtures for the Pre-Mortem test suite."""

import pytest
from unittest.mock import patch

from premortem.state import Screen, initial_state


@pytest.fixture
def base_state():
    """Fresh session state on the Landing screen."""
    return initial_state()


@pytest.fixture
def valid_roadmap_response():
    """Complete valid roadmap response dict in the model's wire format."""
    return {
        "business_concept": "Hand-carved ice cubes shipped monthly to people who own freezers.",
        "doom_score": 87,
        "phases": {
            "market_ignorance": [
                {"id": "m1", "title": "Freezers Exist", "description": "Every customer already makes ice.",
                 "severity": "Company Killer"},
                {"id": "m2", "title": "Luxury Water", "description": "Nobody brags about ice.",
                 "severity": "Major Pivot Required"},
            ],
            "financial_suicide": [
                {"id": "f1", "title": "Cold Chain Logistics", "description": "Refrigerated shipping per cube.",
                 "estimated_burn": "$400k"},
            ],
            "operational_hell": [
                {"id": "o1", "title": "Melting Inventory", "description": "Stock liquidates itself.",
                 "time_wasted": "6 months"},
                {"id": "o2", "title": "FDA Paperwork", "description": "Ice is food.",
                 "time_wasted": "1 year"},
            ],
        },
        "the_obituary": {
            "headline": "Ice Startup Melts Down",
            "tweet_text": "RIP CubeCo. Raised $2M to ship water that was already in your freezer.",
        },
    }


@pytest.fixture
def roadmap_result():
    """A normalized RoadmapResult with items in every category."""
    return {
        "concept_summary": "Ice cubes by subscription.",
        "doom_score": 87,
        "categories": {
            "market_risk": [
                {"id": "m1", "title": "Freezers Exist", "description": "Everyone makes ice.", "severity": "Killer"},
                {"id": "m2", "title": "Luxury Water", "description": "Nobody brags about ice.", "severity": "Major"},
            ],
            "financial_risk": [
                {"id": "f1", "title": "Cold Chain", "description": "Refrigerated shipping.", "burn_estimate": "$400k"},
            ],
            "operational_risk": [
                {"id": "o1", "title": "Melting Inventory", "description": "Stock melts.", "time_cost": "6 months"},
                {"id": "o2", "title": "FDA Paperwork", "description": "Ice is food.", "time_cost": "1 year"},
            ],
        },
        "obituary": {
            "headline": "Ice Startup Melts Down",
            "short_form_summary": "RIP CubeCo.",
        },
    }


@pytest.fixture
def roadmap_state(base_state, roadmap_result):
    """Session sitting on the Roadmap screen after a successful roadmap call."""
    return {
        **base_state,
        "screen": Screen.ROADMAP,
        "idea": "Artisanal ice cube subscription",
        "doom_level": 8,
        "roadmap": roadmap_result,
    }


@pytest.fixture
def inversion_pairs():
    return [
        {"bad_decision": "Ship ice by mail", "strategic_rule": "Never sell what melts in transit."},
        {"bad_decision": "Ignore freezers", "strategic_rule": "Name the free substitute before you build."},
    ]


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "roadmap_model": "gemini-test",
        "inversion_model": "gemini-test",
        "inversion_temperature": 0,
        "llm_max_retries": 0,
        "default_doom_level": 5,
        "fallback_selection_size": 3,
        "output_path": "./output/blueprint.md",
    }
    with patch("premortem.config._config", test_config):
        yield test_config
