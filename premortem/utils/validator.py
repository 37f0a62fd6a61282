"""Input validation — checks the idea text and doom level before a roadmap is requested."""

MIN_DOOM_LEVEL = 1
MAX_DOOM_LEVEL = 10


def validate_input(idea: str) -> str:
    """Validate that the idea is a non-empty string.

    Returns the stripped input on success.
    Raises ValueError if input is empty or whitespace-only.
    """
    if not isinstance(idea, str) or not idea.strip():
        raise ValueError("Idea must be a non-empty string.")
    return idea.strip()


def validate_doom_level(doom_level: int) -> int:
    """Validate that the doom level is an integer in [1, 10]."""
    # bool is an int subclass; a checkbox value is not a doom level
    if isinstance(doom_level, bool) or not isinstance(doom_level, int):
        raise ValueError("Doom level must be an integer.")
    if not MIN_DOOM_LEVEL <= doom_level <= MAX_DOOM_LEVEL:
        raise ValueError(
            f"Doom level must be between {MIN_DOOM_LEVEL} and {MAX_DOOM_LEVEL}, got {doom_level}."
        )
    return doom_level
