# src/core/errors.py

class ScribeError(Exception):
    """Base error for everything the API turns into an `{"error": ...}` body."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingCredential(ScribeError):
    """A required secret is not configured. `credential` names which one."""

    def __init__(self, credential: str):
        super().__init__(f"Missing credential: {credential}")
        self.credential = credential


class PersonaUnavailable(ScribeError):
    """The soul repository could not deliver the persona document."""


class ModelError(ScribeError):
    """Gemini failed to produce a reply."""


class Unauthorized(ScribeError):
    status_code = 401


class ServiceUnavailable(ScribeError):
    """The chat could not start because the persona is missing."""


class GenerationError(ScribeError):
    """The chat started but the model call failed."""
