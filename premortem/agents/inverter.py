"""Inverter Agent — turns chosen failure points into strategic guardrails.

Required output schema:
[
  {"bad_decision": "string", "strategic_rule": "string"}
]
"""

import json
import sys

from langchain_google_genai import ChatGoogleGenerativeAI

from premortem.config import get_config
from premortem.errors import GenerationFailure
from premortem.state import InversionPair
from premortem.utils.parsing import ainvoke_with_retry, response_text, strip_fences

REQUIRED_PAIR_FIELDS = {"bad_decision", "strategic_rule"}

SYSTEM_PROMPT = """\
Apply the mental model of Inversion to these specific points. Transform them into strict, \
actionable 'Anti-Goals' or 'Guardrails' that will prevent these specific failures.

You MUST respond with a JSON array matching this exact schema:
[
  {
    "bad_decision": "string — the tempting mistake, restated in one sentence",
    "strategic_rule": "string — the rule that prevents it, phrased as an instruction"
  }
]

Rules:
- Produce one object per input point.
- Respond ONLY with the JSON array. No markdown fences, no commentary.
"""


def _build_user_prompt(items: list[dict]) -> str:
    listing = "\n".join(f"{item['title']}: {item['description']}" for item in items)
    return f"Invert the following bad decisions into strategic anti-goals/guardrails:\n{listing}"


def _validate_response(data) -> list[InversionPair]:
    """Validate the Inverter response and return the pairs it contains."""
    # Some models wrap the array in an object
    if isinstance(data, dict):
        for key in ("guardrails", "rules", "items", "inversions"):
            if isinstance(data.get(key), list):
                data = data[key]
                break
    if not isinstance(data, list):
        raise ValueError("Inverter response must be a JSON array.")
    if not data:
        raise ValueError("Inverter response must contain at least one pair.")

    pairs = []
    for i, pair in enumerate(data):
        if not isinstance(pair, dict):
            raise ValueError(f"Pair {i} is not an object.")
        missing = REQUIRED_PAIR_FIELDS - set(pair.keys())
        if missing:
            raise ValueError(f"Pair {i} missing required fields: {missing}")
        for field in ("bad_decision", "strategic_rule"):
            if not isinstance(pair[field], str):
                raise ValueError(f"'{field}' of pair {i} must be a string, got {pair[field]!r}.")
        pairs.append({
            "bad_decision": pair["bad_decision"],
            "strategic_rule": pair["strategic_rule"],
        })
    return pairs


async def _request_inversion(items: list[dict]) -> list[InversionPair]:
    config = get_config()
    llm = ChatGoogleGenerativeAI(
        model=config["inversion_model"],
        temperature=config.get("inversion_temperature", 0),
        response_mime_type="application/json",
    )

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": _build_user_prompt(items)},
    ]

    response = await ainvoke_with_retry(llm, messages)
    raw = response_text(response)

    try:
        return _validate_response(json.loads(strip_fences(raw)))
    except (json.JSONDecodeError, ValueError) as exc:
        print(f"[PME] Inversion response rejected ({exc}). Re-prompting once.", file=sys.stderr)
        messages.append({"role": "assistant", "content": raw})
        messages.append({
            "role": "user",
            "content": (
                "Your response did not match the required JSON schema. "
                "Please try again with ONLY the raw JSON array — "
                "no markdown fences, no commentary."
            ),
        })
        response = await ainvoke_with_retry(llm, messages)
        return _validate_response(json.loads(strip_fences(response_text(response))))


async def invert_decisions(items: list[dict]) -> list[InversionPair]:
    """Invert failure items ({title, description}) into guardrails.

    The order of the returned pairs is whatever the model produced. Any
    failure is raised as GenerationFailure.
    """
    if not items:
        raise GenerationFailure("invert_decisions needs at least one item.")
    try:
        return await _request_inversion(items)
    except Exception as exc:
        raise GenerationFailure(f"Inversion failed: {exc}") from exc
