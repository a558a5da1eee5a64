"""Wire contracts between the upload pipeline and the verification backend."""

import re
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from docvault.verification.models import canonical_mime_type

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.\- ()]")
_MAX_NAME_LENGTH = 255


def sanitize_file_name(name: str) -> str:
    """Drop path components and replace characters outside a safe set."""
    base = re.split(r"[\\/]", name)[-1].strip()
    cleaned = _UNSAFE_NAME_CHARS.sub("_", base)
    return cleaned[:_MAX_NAME_LENGTH] or "unnamed"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VerificationBundle(WireModel):
    sha256_hash: str = Field(pattern=r"^[0-9a-f]{64}$")
    file_name: str = Field(min_length=1)
    file_size: int = Field(ge=0)
    mime_type: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("mime_type")
    @classmethod
    def _canonical_mime_type(cls, value: str) -> str:
        return canonical_mime_type(value)

    @classmethod
    def build(
        cls,
        *,
        sha256_hash: str,
        file_name: str,
        file_size: int,
        mime_type: str,
        metadata: dict[str, Any],
    ) -> "VerificationBundle":
        return cls(
            sha256_hash=sha256_hash,
            file_name=sanitize_file_name(file_name),
            file_size=file_size,
            mime_type=mime_type,
            metadata=metadata,
        )


class CheckResult(WireModel):
    passed: bool = True
    reason: str | None = None
    warning: str | None = None
    note: str | None = None
    confidence: float | None = None
    issues: list[str] | None = None
    summary: str | None = None
    authentic: bool | None = None
    count: int | None = None


class ServerResults(WireModel):
    hash_check: CheckResult = Field(default_factory=CheckResult)
    duplicate_check: CheckResult = Field(default_factory=CheckResult)
    metadata_check: CheckResult = Field(default_factory=CheckResult)
    ai_analysis: CheckResult = Field(default_factory=CheckResult)

    def checks(self) -> Iterator[tuple[str, CheckResult]]:
        """Yield (wire name, result) pairs in evaluation order."""
        for name in ("hash_check", "duplicate_check", "metadata_check", "ai_analysis"):
            yield to_camel(name), getattr(self, name)


class CriticalFailure(WireModel):
    check: str
    reason: str | None = None


class ServerVerdict(WireModel):
    verified: bool
    results: ServerResults
    critical_failures: list[CriticalFailure] = Field(default_factory=list)
    timestamp: datetime

    @classmethod
    def from_results(cls, results: ServerResults, now: datetime | None = None) -> "ServerVerdict":
        failures = [
            CriticalFailure(check=name, reason=result.reason)
            for name, result in results.checks()
            if not result.passed
        ]
        return cls(
            verified=not failures,
            results=results,
            critical_failures=failures,
            timestamp=now or datetime.now(timezone.utc),
        )


class EnforcementRequest(WireModel):
    user_id: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    file_name: str = ""
    sha256_hash: str | None = None


class EnforcementResult(WireModel):
    flag_recorded: bool = False
    event_recorded: bool = False
    blacklisted: bool = False
    suspended: bool = False
    notified: bool = False

    @property
    def core_succeeded(self) -> bool:
        return self.flag_recorded and self.suspended


class EnforcementResponse(WireModel):
    success: bool
    message: str
    result: EnforcementResult
