"""Error types shared by the controller and the model collaborators."""


class GenerationFailure(Exception):
    """A model call did not produce a complete, schema-valid result.

    Raised for any reason (network, quota, timeout, malformed JSON). The
    cause is chained via ``raise ... from``.
    """


class InvalidTransition(ValueError):
    """The requested action is not allowed from the current screen."""
