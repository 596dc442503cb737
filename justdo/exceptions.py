"""Custom exception hierarchy for justdo."""

from __future__ import annotations

from enum import Enum


class JustDoError(Exception):
    """Base exception for justdo."""
    pass


class ServiceUnavailableError(JustDoError):
    """Raised when a collaborator needed by a tool is not configured."""
    pass


# --------------------------------------------------------------------------- #
# Storage                                                                      #
# --------------------------------------------------------------------------- #

class StorageErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INVALID = "invalid"
    UNKNOWN = "unknown"


class StorageError(JustDoError):
    """Raised by entry stores. `kind` is what callers branch on."""

    kind: StorageErrorKind = StorageErrorKind.UNKNOWN

    def __init__(self, message: str, kind: StorageErrorKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class EntryNotFoundError(StorageError):
    kind = StorageErrorKind.NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(f"Entry not found: {path}")
        self.path = path


class EntryAlreadyExistsError(StorageError):
    kind = StorageErrorKind.ALREADY_EXISTS

    def __init__(self, path: str) -> None:
        super().__init__(f"Entry already exists: {path}")
        self.path = path


class InvalidEntryDataError(StorageError):
    kind = StorageErrorKind.INVALID


def is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, StorageError) and exc.kind is StorageErrorKind.NOT_FOUND


# --------------------------------------------------------------------------- #
# Classification                                                               #
# --------------------------------------------------------------------------- #

class ClassificationErrorKind(str, Enum):
    TIMEOUT = "timeout"
    API = "api"
    INVALID_RESPONSE = "invalid_response"
    GENERIC = "generic"


class ClassificationError(JustDoError):
    """Classification failed for a reason not covered by a narrower kind."""

    kind: ClassificationErrorKind = ClassificationErrorKind.GENERIC

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error

    @property
    def transient(self) -> bool:
        """True when replaying the same request later may succeed."""
        return self.kind in (ClassificationErrorKind.TIMEOUT, ClassificationErrorKind.API)


class ClassificationTimeoutError(ClassificationError):
    kind = ClassificationErrorKind.TIMEOUT

    def __init__(self, message: str = "Classification request timed out") -> None:
        super().__init__(message)


class ClassificationAPIError(ClassificationError):
    kind = ClassificationErrorKind.API


class InvalidClassificationResponseError(ClassificationError):
    kind = ClassificationErrorKind.INVALID_RESPONSE

    def __init__(self, message: str, raw_response: str | None = None) -> None:
        super().__init__(message)
        self.raw_response = raw_response


# --------------------------------------------------------------------------- #
# Safety services                                                              #
# --------------------------------------------------------------------------- #

class ToolGuardrailError(JustDoError):
    """The guardrail could not produce a decision."""

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class IntentAnalysisError(JustDoError):
    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class ActionExtractionError(JustDoError):
    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class DisambiguationError(JustDoError):
    """Several entries match a stale reference equally well."""

    def __init__(self, message: str, options: list[tuple[str, str]] | None = None) -> None:
        super().__init__(message)
        self.options = options or []
