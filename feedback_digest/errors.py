"""Exceptions raised across the digest pipeline."""


class DigestError(Exception):
    """Base class for digest pipeline errors."""


class NoFeedback(DigestError):
    """Raised when there is no feedback to analyze."""

    def __init__(self, message: str = "No feedback to analyze"):
        super().__init__(message)


class InferenceUnavailable(DigestError):
    """The completion endpoint could not be reached or returned an unusable response."""


class InferenceParseFailure(DigestError):
    """The completion text did not contain a valid digest payload."""


class DeliveryFailure(DigestError):
    """A digest message could not be delivered."""


class StepFailed(DigestError):
    """A workflow step exhausted its retry budget."""

    def __init__(self, step: str, attempts: int, cause: Exception):
        self.step = step
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Step '{step}' failed after {attempts} attempt(s): {cause}")
