"""Gateway error types and their classification."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    AUTH = "auth"  # missing/invalid credentials, fatal for the run
    TRANSIENT = "transient"  # overload or rate limit, worth retrying
    OTHER = "other"


class GatewayError(Exception):
    """The LLM gateway answered with an error (or could not be reached)."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (status {self.status})"
        return self.message


def classify_error(error: BaseException) -> ErrorKind:
    status = getattr(error, "status", None)
    message = getattr(error, "message", None) or str(error)

    if status == 401 or "API key" in message:
        return ErrorKind.AUTH
    lowered = message.lower()
    if status == 429 or "overloaded" in lowered or "rate_limit" in lowered:
        return ErrorKind.TRANSIENT
    return ErrorKind.OTHER


def is_transient(error: BaseException) -> bool:
    return classify_error(error) is ErrorKind.TRANSIENT


def is_auth_error(error: BaseException) -> bool:
    return classify_error(error) is ErrorKind.AUTH
