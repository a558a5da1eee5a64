from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docvault.verification.models import UploadStatus


class VerificationError(Exception):
    """Base exception for all verification pipeline errors."""


class StepTransitionError(VerificationError):
    """Raised when a step is moved backwards or revisited within one run."""


class UploadStateError(VerificationError):
    """Raised when an upload attempt moves to a state it cannot reach."""


class FileTooLargeError(VerificationError):
    """Raised when a file exceeds the vault upload size limit."""


class ServiceUnavailableError(VerificationError):
    """Raised when a remote verification or enforcement call cannot complete."""


class DocumentStorageError(VerificationError):
    """Raised when a verified document could not be stored.

    The upload attempt has already moved to its terminal error state; the
    underlying failure is chained as __cause__.
    """

    def __init__(self, message: str, status: "UploadStatus") -> None:
        super().__init__(message)
        self.status = status
