from __future__ import annotations

from typing import Optional


class LangPackError(Exception):
    """Raised when the language pack backend answers with an unusable payload."""


class ActivationError(Exception):
    """Base class for every way a language activation can fail."""

    reason = "failed"

    def __init__(self, language_code: str, message: str = "") -> None:
        self.language_code = language_code
        super().__init__(message or f"activation of '{language_code}' {self.reason}")


class ActivationNetworkError(ActivationError):
    reason = "failed: network error"


class ActivationStorageError(ActivationError):
    reason = "failed: storage error"


class ActivationTimeout(ActivationError):
    reason = "timed out"

    def __init__(self, language_code: str, timeout: Optional[float]) -> None:
        self.timeout = timeout
        super().__init__(language_code, f"activation of '{language_code}' timed out after {timeout}s")


class ActivationSuperseded(ActivationError):
    """The request was cancelled because a newer one replaced it."""

    reason = "superseded by a newer request"
