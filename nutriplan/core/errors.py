"""
Error taxonomy for action handling.

Every failure the router knows how to describe is an ActionError carrying the
HTTP status it maps to. Anything else raised by the completion service is
reported as a 500 with the provider's own message.
"""


class ActionError(Exception):
    """Base class for failures surfaced to the caller as {"error": ...}."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Input validation (4xx, never retried) ---

class InvalidRequestError(ActionError):
    """Envelope or payload did not pass validation."""

    status_code = 400


class UnknownActionError(InvalidRequestError):
    """Action name is not in the catalog."""

    def __init__(self, action: str):
        super().__init__(f"Unknown action: {action}")
        self.action = action


class InvalidImageDataError(InvalidRequestError):
    """Data URL is malformed or lacks a MIME type."""


# --- Upstream failures (5xx, caller may retry) ---

class AIResponseError(ActionError):
    """Completion service answered, but the answer is unusable."""

    status_code = 500


class EmptyResponseError(AIResponseError):
    def __init__(self):
        super().__init__("AI returned an empty response")


class MalformedResponseError(AIResponseError):
    def __init__(self, detail: str | None = None):
        message = "AI returned malformed JSON"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class AITimeoutError(ActionError):
    """Provider call exceeded the configured total duration."""

    status_code = 504

    def __init__(self, seconds: float):
        super().__init__(f"AI request timed out after {seconds:.0f}s")
