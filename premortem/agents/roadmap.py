"""Roadmap Agent — asks Gemini how a business idea will fail.

The model answers in the wire format below, which is then validated and
mapped onto the RoadmapResult used by the controller:
{
  "business_concept": "string",
  "doom_score": "integer 0-100",
  "phases": {
    "market_ignorance":  [{"id", "title", "description", "severity"}],
    "financial_suicide": [{"id", "title", "description", "estimated_burn"}],
    "operational_hell":  [{"id", "title", "description", "time_wasted"}]
  },
  "the_obituary": {"headline": "string", "tweet_text": "string"}
}
"""

import json
import sys

from langchain_google_genai import ChatGoogleGenerativeAI

from premortem.config import get_config
from premortem.errors import GenerationFailure
from premortem.state import RoadmapResult
from premortem.utils.parsing import ainvoke_with_retry, response_text, strip_fences

# wire phase -> (domain category, wire annotation field, domain annotation field, id prefix)
_PHASES = {
    "market_ignorance": ("market_risk", "severity", "severity", "m"),
    "financial_suicide": ("financial_risk", "estimated_burn", "burn_estimate", "f"),
    "operational_hell": ("operational_risk", "time_wasted", "time_cost", "o"),
}

REQUIRED_ITEM_FIELDS = {"title", "description"}

# Map common LLM severity deviations to valid severities
_SEVERITY_ALIASES = {
    "minor": "Minor",
    "minor setback": "Minor",
    "low": "Minor",
    "major": "Major",
    "major pivot required": "Major",
    "medium": "Major",
    "high": "Major",
    "killer": "Killer",
    "company killer": "Killer",
    "critical": "Killer",
    "fatal": "Killer",
}

SYSTEM_PROMPT = """\
You are the 'Chaos Consultant.' Your job is to analyze business ideas and ruthlessly identify \
their failure points. Do not be polite. Do not offer encouragement. Use the principle of \
Inversion. Use a cynical, dry, and analytical tone.

Output categories:
1. Market Ignorance: Why the market will reject this.
2. Financial Suicide: Expensive early mistakes.
3. Operational Hell: Logistical/legal nightmares.

The doom level (1-10) sets how bleak the analysis is. Scale your cynicism with it.

You MUST respond with valid JSON matching this exact schema:
{
  "business_concept": "string — one-sentence restatement of the idea",
  "doom_score": integer (0-100, likelihood of total failure),
  "phases": {
    "market_ignorance": [
      {"id": "string (e.g. m1)", "title": "string", "description": "string",
       "severity": "Minor Setback | Major Pivot Required | Company Killer"}
    ],
    "financial_suicide": [
      {"id": "string (e.g. f1)", "title": "string", "description": "string",
       "estimated_burn": "string (e.g. $250k)"}
    ],
    "operational_hell": [
      {"id": "string (e.g. o1)", "title": "string", "description": "string",
       "time_wasted": "string (e.g. 9 months)"}
    ]
  },
  "the_obituary": {
    "headline": "string — the tech-press headline announcing the shutdown",
    "tweet_text": "string — a viral post summarizing the collapse"
  }
}

Rules:
- Give 3-4 items per phase. Every id must be unique across all phases.
- Respond ONLY with the JSON object. No markdown fences, no commentary.
"""


def _build_user_prompt(idea: str, doom_level: int) -> str:
    return f'Analyze this business idea and show how it will fail: "{idea}". Doom level: {doom_level}/10.'


def _normalize_severity(value) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Invalid severity {value!r}.")
    if value in ("Minor", "Major", "Killer"):
        return value
    normalized = _SEVERITY_ALIASES.get(value.strip().lower())
    if not normalized:
        raise ValueError(f"Invalid severity '{value}'. Must be Minor, Major or Killer.")
    return normalized


def _normalize_doom_score(value) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"doom_score must be an integer, got {value!r}.") from None
    clamped = max(0, min(100, score))
    if clamped != score:
        print(f"[PME] Warning: doom_score {score} clamped to {clamped}.", file=sys.stderr)
    return clamped


def _require_str(value, where: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{where} must be a string, got {value!r}.")
    return value


def _validate_response(data: dict) -> RoadmapResult:
    """Validate the wire response and map it onto a RoadmapResult.

    Raises ValueError on anything that cannot be repaired.
    """
    if not isinstance(data, dict):
        raise ValueError("Roadmap response must be a JSON object.")
    for field in ("business_concept", "doom_score", "phases", "the_obituary"):
        if field not in data:
            raise ValueError(f"Roadmap response missing '{field}' field.")

    phases = data["phases"]
    if not isinstance(phases, dict):
        raise ValueError("'phases' must be an object.")

    categories = {}
    seen_ids = set()
    for phase, (category, wire_field, domain_field, prefix) in _PHASES.items():
        if phase not in phases:
            raise ValueError(f"Roadmap response missing phase '{phase}'.")
        if not isinstance(phases[phase], list):
            raise ValueError(f"Phase '{phase}' must be an array.")
        items = []
        for i, raw in enumerate(phases[phase]):
            if not isinstance(raw, dict):
                raise ValueError(f"Item {i} in '{phase}' is not an object.")
            missing = REQUIRED_ITEM_FIELDS - set(raw.keys())
            if missing:
                raise ValueError(f"Item {i} in '{phase}' missing required fields: {missing}")
            if wire_field not in raw:
                raise ValueError(f"Item {i} in '{phase}' missing '{wire_field}'.")

            item_id = str(raw.get("id") or "").strip()
            if not item_id:
                item_id = f"{prefix}{i + 1}"
                print(
                    f"[PME] Warning: item {i} in '{phase}' has no id. Using '{item_id}'.",
                    file=sys.stderr,
                )
            if item_id in seen_ids:
                raise ValueError(f"Duplicate item id '{item_id}'.")
            seen_ids.add(item_id)

            annotation = raw[wire_field]
            if wire_field == "severity":
                annotation = _normalize_severity(annotation)
            else:
                annotation = _require_str(annotation, f"'{wire_field}' of item {i} in '{phase}'")

            items.append({
                "id": item_id,
                "title": _require_str(raw["title"], f"'title' of item {i} in '{phase}'"),
                "description": _require_str(raw["description"], f"'description' of item {i} in '{phase}'"),
                domain_field: annotation,
            })
        categories[category] = items

    if not seen_ids:
        raise ValueError("Roadmap response has no failure items in any phase.")

    obituary = data["the_obituary"]
    if not isinstance(obituary, dict) or "headline" not in obituary or "tweet_text" not in obituary:
        raise ValueError("'the_obituary' must have 'headline' and 'tweet_text'.")

    return {
        "concept_summary": _require_str(data["business_concept"], "'business_concept'"),
        "doom_score": _normalize_doom_score(data["doom_score"]),
        "categories": categories,
        "obituary": {
            "headline": _require_str(obituary["headline"], "'headline'"),
            "short_form_summary": _require_str(obituary["tweet_text"], "'tweet_text'"),
        },
    }


async def _request_roadmap(idea: str, doom_level: int) -> RoadmapResult:
    config = get_config()
    model_name = config["roadmap_model"]

    # Randomness scales with the doom level
    llm = ChatGoogleGenerativeAI(
        model=model_name,
        temperature=doom_level / 10,
        response_mime_type="application/json",
    )

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": _build_user_prompt(idea, doom_level)},
    ]

    # First attempt
    response = await ainvoke_with_retry(llm, messages)
    raw = response_text(response)

    try:
        return _validate_response(json.loads(strip_fences(raw)))
    except (json.JSONDecodeError, ValueError, TypeError, OverflowError) as exc:
        # Re-prompt once before giving up
        print(f"[PME] Roadmap response rejected ({exc}). Re-prompting once.", file=sys.stderr)
        messages.append({"role": "assistant", "content": raw})
        messages.append({
            "role": "user",
            "content": (
                "Your response did not match the required JSON schema. "
                "Please try again with ONLY the raw JSON object — "
                "no markdown fences, no commentary."
            ),
        })
        response = await ainvoke_with_retry(llm, messages)
        return _validate_response(json.loads(strip_fences(response_text(response))))


async def generate_roadmap(idea: str, doom_level: int) -> RoadmapResult:
    """Generate a failure roadmap for idea.

    doom_level is passed through unmodified; it only drives the prompt and
    the sampling temperature. Any failure is raised as GenerationFailure.
    """
    try:
        return await _request_roadmap(idea, doom_level)
    except Exception as exc:
        raise GenerationFailure(f"Roadmap generation failed: {exc}") from exc
