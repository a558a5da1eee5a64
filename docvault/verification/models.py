import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from docvault.verification.exceptions import StepTransitionError, UploadStateError


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self not in (StepStatus.PENDING, StepStatus.RUNNING)


_STEP_TRANSITIONS: dict[StepStatus, frozenset[StepStatus]] = {
    StepStatus.PENDING: frozenset({StepStatus.RUNNING, StepStatus.SKIPPED}),
    StepStatus.RUNNING: frozenset(
        {StepStatus.PASSED, StepStatus.FAILED, StepStatus.WARNING, StepStatus.SKIPPED}
    ),
}


@dataclass
class VerificationStep:
    """One named stage of the verification report.

    Status only moves forward: pending -> running -> terminal, or straight
    from pending to skipped when the step is never run.
    """

    id: str
    label: str
    status: StepStatus = StepStatus.PENDING
    detail: str | None = None

    def start(self) -> None:
        self._move(StepStatus.RUNNING)

    def finish(self, status: StepStatus, detail: str | None = None) -> None:
        if not status.is_terminal:
            raise StepTransitionError(f"Step '{self.id}' cannot finish as {status.value}")
        self._move(status)
        self.detail = detail

    def skip(self, detail: str) -> None:
        """Skip a step whether or not it was started."""
        self._move(StepStatus.SKIPPED)
        self.detail = detail

    def _move(self, target: StepStatus) -> None:
        allowed = _STEP_TRANSITIONS.get(self.status, frozenset())
        if target not in allowed:
            raise StepTransitionError(
                f"Step '{self.id}' cannot move from {self.status.value} to {target.value}"
            )
        self.status = target


STEP_DEFINITIONS: tuple[tuple[str, str], ...] = (
    ("signature", "File signature"),
    ("content", "Content scan"),
    ("hash", "Content fingerprint"),
    ("metadata", "Metadata analysis"),
    ("pdf", "PDF structure"),
    ("duplicate", "Duplicate & flag check"),
    ("ai", "Authenticity review"),
)


def new_report() -> list[VerificationStep]:
    """Build a fresh report with one pending entry per defined step."""
    return [VerificationStep(id=step_id, label=label) for step_id, label in STEP_DEFINITIONS]


class UploadStatus(str, Enum):
    IDLE = "idle"
    VERIFYING = "verifying"
    ENCRYPTING = "encrypting"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


_UPLOAD_TRANSITIONS: dict[UploadStatus, frozenset[UploadStatus]] = {
    UploadStatus.IDLE: frozenset({UploadStatus.VERIFYING, UploadStatus.ERROR}),
    UploadStatus.VERIFYING: frozenset({UploadStatus.ENCRYPTING, UploadStatus.ERROR}),
    UploadStatus.ENCRYPTING: frozenset({UploadStatus.UPLOADING, UploadStatus.ERROR}),
    UploadStatus.UPLOADING: frozenset({UploadStatus.SUCCESS, UploadStatus.ERROR}),
}


def advance_upload(current: UploadStatus, target: UploadStatus) -> UploadStatus:
    """Validate an upload state transition and return the new state."""
    if target not in _UPLOAD_TRANSITIONS.get(current, frozenset()):
        raise UploadStateError(f"Upload cannot move from {current.value} to {target.value}")
    return target


MIME_ALIASES: dict[str, str] = {
    "image/jpg": "image/jpeg",
}


def canonical_mime_type(mime_type: str) -> str:
    """Bare lower-case type with aliases resolved: "Image/JPG; q=1" -> "image/jpeg"."""
    base = mime_type.split(";", 1)[0].strip().lower()
    return MIME_ALIASES.get(base, base)


@dataclass(frozen=True)
class FileDescriptor:
    """Immutable facts about a candidate upload.

    mime_type is stored in canonical form so every step sees the same type
    the signature check accepted.
    """

    name: str
    mime_type: str
    size: int
    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "mime_type", canonical_mime_type(self.mime_type))

    def head(self, length: int) -> bytes:
        return self.data[:length]

    @classmethod
    def from_bytes(cls, name: str, mime_type: str, data: bytes) -> "FileDescriptor":
        return cls(name=name, mime_type=mime_type, size=len(data), data=data)

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> "FileDescriptor":
        """Read a file from disk, guessing its declared type from the extension."""
        data = path.read_bytes()
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            mime_type = guessed or "application/octet-stream"
        return cls(name=path.name, mime_type=mime_type, size=len(data), data=data)


@dataclass(frozen=True)
class ScanResult:
    """Outcome of the content scanner."""

    safe: bool
    reason: str | None = None


@dataclass
class DocumentMetadata:
    """Format-specific facts extracted from a bounded byte window."""

    producer: str | None = None
    creator: str | None = None
    creation_date: str | None = None
    mod_date: str | None = None
    software: str | None = None
    is_pdf: bool = False
    eof_count: int = 0
    has_annotations: bool = False
    has_form_fields: bool = False
    base64_preview: str | None = None

    @property
    def has_incremental_saves(self) -> bool:
        return self.eof_count > 1

    def pdf_features(self) -> list[str]:
        features = []
        if self.has_annotations:
            features.append("annotations")
        if self.has_form_fields:
            features.append("form fields")
        return features

    def to_payload(self) -> dict[str, object]:
        """Render the wire form sent to the verification service."""
        payload: dict[str, object] = {}
        for key, value in (
            ("producer", self.producer),
            ("creator", self.creator),
            ("createDate", self.creation_date),
            ("modifyDate", self.mod_date),
            ("software", self.software),
            ("base64Preview", self.base64_preview),
        ):
            if value is not None:
                payload[key] = value
        if self.is_pdf:
            pdf_info: dict[str, object] = {
                "hasIncrementalSaves": self.has_incremental_saves,
                "hasAnnotations": self.has_annotations,
                "hasFormFields": self.has_form_fields,
            }
            if self.producer is not None:
                pdf_info["producer"] = self.producer
            payload["pdfInfo"] = pdf_info
        return payload


@dataclass(frozen=True)
class Rejection:
    """User-visible reason an upload was refused."""

    category: str
    reason: str
    account_flagged: bool

    @property
    def message(self) -> str:
        outcome = (
            "Your account has been suspended pending review."
            if self.account_flagged
            else "The upload was refused."
        )
        return f"Document rejected ({self.category}): {self.reason}. {outcome}"


@dataclass
class UploadResult:
    """Final state of one upload attempt."""

    status: UploadStatus
    steps: list[VerificationStep]
    sha256_hash: str | None = None
    storage_path: str | None = None
    document_id: str | None = None
    rejection: Rejection | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is UploadStatus.SUCCESS

    def step(self, step_id: str) -> VerificationStep:
        for step in self.steps:
            if step.id == step_id:
                return step
        raise KeyError(step_id)
