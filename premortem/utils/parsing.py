"""Shared parsing and LLM utilities for collaborator responses."""

import re
import sys

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def strip_fences(text: str) -> str:
    """Strip markdown code fences from LLM output if present."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def response_text(response) -> str:
    """Return the text of a chat model response.

    Gemini responses may carry content as a list of parts instead of a string.
    """
    content = response.content
    if isinstance(content, list):
        return "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )
    return content or ""


def _is_transient(exc: BaseException) -> bool:
    """Return True if the exception is a transient HTTP/network error worth retrying."""
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.ConnectError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in (429, 500, 502, 503)
    return False


async def ainvoke_with_retry(llm, messages, max_retries: int = 3):
    """Await llm.ainvoke(messages) with exponential backoff on transient errors.

    Retries on HTTP 429/500/502/503, connection errors, and timeouts.
    Non-transient errors (auth failures, schema issues) are raised immediately.
    """
    from premortem.config import get_config

    config = get_config()
    retries = config.get("llm_max_retries", max_retries)

    @retry(
        stop=stop_after_attempt(retries + 1),  # +1 because first attempt counts
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda state: print(
            f"[PME] Transient error: {state.outcome.exception()!r}. "
            f"Retrying in {state.next_action.sleep:.0f}s "
            f"(attempt {state.attempt_number}/{retries})...",
            file=sys.stderr,
        ),
    )
    async def _ainvoke():
        return await llm.ainvoke(messages)

    return await _ainvoke()
