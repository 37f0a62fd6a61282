"""Interaction state — single record describing one Pre-Mortem session."""

from enum import Enum
from typing import NotRequired, TypedDict

from premortem.config import get_config


class Screen(str, Enum):
    LANDING = "landing"
    SIMULATING = "simulating"
    ROADMAP = "roadmap"
    AUTOPSY = "autopsy"
    INVERTING = "inverting"
    INVERSION = "inversion"


# Category keys in display order. Working sets and fallbacks follow this order.
CATEGORIES = ("market_risk", "financial_risk", "operational_risk")

# The one annotation each category carries besides id/title/description.
CATEGORY_ANNOTATIONS = {
    "market_risk": "severity",
    "financial_risk": "burn_estimate",
    "operational_risk": "time_cost",
}

SEVERITIES = ("Minor", "Major", "Killer")


class FailureItem(TypedDict):
    id: str  # Unique within a RoadmapResult.
    title: str
    description: str
    severity: NotRequired[str]  # market_risk only. One of SEVERITIES.
    burn_estimate: NotRequired[str]  # financial_risk only.
    time_cost: NotRequired[str]  # operational_risk only.


class Obituary(TypedDict):
    headline: str
    short_form_summary: str


class RoadmapResult(TypedDict):
    concept_summary: str
    doom_score: int  # 0-100.
    categories: dict[str, list[FailureItem]]  # Keyed by CATEGORIES.
    obituary: Obituary


class InversionPair(TypedDict):
    bad_decision: str
    strategic_rule: str


class InteractionState(TypedDict):
    screen: Screen  # Current screen. Changed only by controller transitions.
    idea: str  # Trimmed idea text from the last submit.
    doom_level: int  # 1-10, passed through to the roadmap generator.
    roadmap: RoadmapResult | None  # Set on a successful roadmap call.
    selected_ids: frozenset[str]  # Subset of roadmap item ids.
    inversion: list[InversionPair] | None  # Set on a successful inversion call.
    is_inverted: bool  # Permanent once set, until restart.
    error: str | None  # Transient, dismissible error message.


def initial_state() -> InteractionState:
    """Return a fresh session state. The doom level starts at the configured default."""
    return {
        "screen": Screen.LANDING,
        "idea": "",
        "doom_level": get_config().get("default_doom_level", 5),
        "roadmap": None,
        "selected_ids": frozenset(),
        "inversion": None,
        "is_inverted": False,
        "error": None,
    }


def all_items(roadmap: RoadmapResult | None) -> list[FailureItem]:
    """Concatenate a roadmap's items in category order."""
    if not roadmap:
        return []
    items: list[FailureItem] = []
    for category in CATEGORIES:
        items.extend(roadmap["categories"].get(category, []))
    return items
