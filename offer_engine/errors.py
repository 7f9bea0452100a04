"""Error kinds surfaced by the analysis core."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    ENGINE_UNAVAILABLE = "EngineUnavailable"
    INVALID_RESPONSE = "InvalidResponse"
    STORAGE_CORRUPT = "StorageCorrupt"


class OfferEngineError(Exception):
    """Base error. Every subclass carries a distinguishable ``kind``."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class AnalysisError(OfferEngineError):
    """Raised by the analysis client on unrecoverable conditions."""


class OfferValidationError(AnalysisError):
    """An OfferInput field violates its invariant. Raised before any network call."""

    kind = ErrorKind.VALIDATION

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Invalid offer input - {detail}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "errors": self.errors}


class EngineUnavailable(AnalysisError):
    """Transport or capability failure, including timeouts."""

    kind = ErrorKind.ENGINE_UNAVAILABLE


class CapabilityUnavailable(EngineUnavailable):
    """The engine rejected an optional capability (e.g. search grounding)."""

    def __init__(self, message: str, capability: str = "search"):
        super().__init__(message)
        self.capability = capability


class InvalidResponse(AnalysisError):
    """The engine replied, but the payload does not match the result schema."""

    kind = ErrorKind.INVALID_RESPONSE

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class StorageCorrupt(OfferEngineError):
    """The persisted archive could not be read. Recovered by starting empty."""

    kind = ErrorKind.STORAGE_CORRUPT


class SelectionLimitExceeded(ValueError):
    """More offers selected for comparison than the configured bound."""

    def __init__(self, selected: int, limit: int):
        super().__init__(f"Cannot compare {selected} offers; the limit is {limit}")
        self.selected = selected
        self.limit = limit
