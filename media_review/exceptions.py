"""Custom exceptions shared across services."""

from dataclasses import dataclass


@dataclass(eq=False)
class ServiceError(Exception):
    """Base exception for service layer failures."""

    message: str
    code: str = "service_error"
    status_code: int | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass(eq=False)
class InvalidMessageError(ServiceError):
    """Raised before any network call when the message is incomplete."""

    code: str = "validation_error"


@dataclass(eq=False)
class ModelServiceError(ServiceError):
    """Raised when the model service fails to return a usable answer."""

    code: str = "model_error"


@dataclass(eq=False)
class NoCandidatesError(ModelServiceError):
    """Raised when the model returns no candidates at all."""
