"""Server-side decision stage for uploaded documents.

Given a content hash and extracted metadata, decide whether the document
may be stored:

* hash check      - the content was flagged before;
* duplicate check - too many unrelated accounts uploaded the same content;
* metadata check  - restricted editing software or post-issuance edits;
* AI analysis     - a vision model's opinion of an image preview.

Every request is recorded in document_hashes afterwards, whatever the
outcome, so later uploads can be counted against it.
"""

import re
from datetime import datetime, timezone
from typing import Any

from docvault.database.models import DocumentHashRecord
from docvault.database.repositories.verification_repository import VerificationRepository
from docvault.logging.logger import Log
from docvault.oracle.base import BaseAuthenticityOracle
from docvault.oracle.exceptions import OracleError, OracleUnavailableError
from docvault.oracle.models import AuthenticityContext
from docvault.verification.schemas import CheckResult, ServerResults, ServerVerdict, VerificationBundle

_PDF_DATE = re.compile(
    r"^D:(?P<year>\d{4})(?P<month>\d{2})?(?P<day>\d{2})?"
    r"(?P<hour>\d{2})?(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?P<tz>Z|[+\-]\d{2}'?\d{2}'?)?"
)
_EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def parse_metadata_date(value: str) -> datetime | None:
    """Parse PDF (D:YYYYMMDDHHmmSS+HH'mm'), EXIF or ISO-8601 dates."""
    value = value.strip()
    match = _PDF_DATE.match(value)
    if match:
        parts = match.groupdict()
        try:
            parsed = datetime(
                int(parts["year"]),
                int(parts["month"] or 1),
                int(parts["day"] or 1),
                int(parts["hour"] or 0),
                int(parts["minute"] or 0),
                int(parts["second"] or 0),
            )
        except ValueError:
            return None
        tz = parts["tz"]
        if tz and tz != "Z":
            tz = tz.replace("'", "")
            return datetime.fromisoformat(f"{parsed.isoformat()}{tz[:3]}:{tz[3:5]}")
        return parsed.replace(tzinfo=timezone.utc)

    for parser in (
        lambda text: datetime.strptime(text, _EXIF_DATE_FORMAT),
        lambda text: datetime.fromisoformat(text.replace("Z", "+00:00")),
    ):
        try:
            parsed = parser(value)
        except ValueError:
            continue
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


class VerificationService:
    """Runs the server-side checks and returns one aggregate verdict."""

    def __init__(
        self,
        *,
        repository: VerificationRepository,
        oracle: BaseAuthenticityOracle | None,
        restricted_editors: list[str],
        duplicate_threshold: int = 2,
        rapid_edit_seconds: int = 60,
        ai_confidence_override: int = 70,
    ) -> None:
        self._repository = repository
        self._oracle = oracle
        self._restricted_editors = [editor.lower() for editor in restricted_editors]
        self._duplicate_threshold = duplicate_threshold
        self._rapid_edit_seconds = rapid_edit_seconds
        self._ai_confidence_override = ai_confidence_override

    def verify(self, user_id: str, bundle: VerificationBundle) -> ServerVerdict:
        Log.info(f"Verifying {bundle.file_name} ({bundle.sha256_hash[:12]}) for user {user_id}")
        results = ServerResults(
            hash_check=self.check_hash(bundle.sha256_hash),
            duplicate_check=self.check_duplicates(bundle.sha256_hash, user_id),
            metadata_check=self.check_metadata(bundle.metadata),
            ai_analysis=self.analyze(bundle),
        )
        self._repository.record_hash(
            DocumentHashRecord(
                sha256_hash=bundle.sha256_hash,
                user_id=user_id,
                file_name=bundle.file_name,
                file_size=bundle.file_size,
            )
        )
        verdict = ServerVerdict.from_results(results)
        if verdict.verified:
            Log.info(f"{bundle.file_name} passed server verification")
        else:
            Log.warning(
                f"{bundle.file_name} failed server verification: "
                f"{[failure.check for failure in verdict.critical_failures]}"
            )
        return verdict

    def check_hash(self, sha256_hash: str) -> CheckResult:
        lookup = self._repository.lookup_hash(sha256_hash)
        if lookup.is_flagged:
            return CheckResult(
                passed=False,
                reason=f"Previously flagged document: {lookup.flag_reason or 'no reason recorded'}",
            )
        return CheckResult()

    def check_duplicates(self, sha256_hash: str, user_id: str) -> CheckResult:
        """Fail when more than the threshold of other accounts uploaded this content.

        The uploader is left out of the count, so re-uploading one's own
        document never counts against the threshold. The count is taken before
        this upload is recorded.
        """
        count = self._repository.count_distinct_uploaders(sha256_hash, exclude_user_id=user_id)
        if count > self._duplicate_threshold:
            return CheckResult(
                passed=False,
                reason=(
                    f"Document uploaded by {count} different users, "
                    "possible mass-submitted forgery"
                ),
                count=count,
            )
        return CheckResult(count=count)

    def check_metadata(self, metadata: dict[str, Any]) -> CheckResult:
        reasons: list[str] = []
        warnings: list[str] = []

        editor = self._restricted_editor(metadata)
        if editor:
            reasons.append(f"Document created/modified with image editing software: {editor}")

        pdf_info = metadata.get("pdfInfo")
        if isinstance(pdf_info, dict):
            if pdf_info.get("hasIncrementalSaves") is True:
                reasons.append("PDF has incremental saves indicating post-issuance editing")
            if pdf_info.get("hasAnnotations") is True:
                warnings.append("PDF contains annotation layers")

        if self._is_rapid_edit(metadata):
            warnings.append(
                f"Document was modified within {self._rapid_edit_seconds} seconds of creation"
            )

        return CheckResult(
            passed=not reasons,
            reason="; ".join(reasons) or None,
            warning="; ".join(warnings) or None,
        )

    def analyze(self, bundle: VerificationBundle) -> CheckResult:
        """Ask the oracle about an image preview.

        A declined or unreadable opinion passes with a note. Otherwise the
        check passes unless the oracle says not authentic with confidence at
        or below the override threshold.
        """
        preview = bundle.metadata.get("base64Preview")
        if not isinstance(preview, str) or not preview:
            return CheckResult(note="No preview supplied")
        if self._oracle is None:
            return CheckResult(note="AI analysis not configured")

        context = AuthenticityContext(
            file_name=bundle.file_name,
            mime_type=bundle.mime_type,
            file_size=bundle.file_size,
        )
        try:
            verdict = self._oracle.score_authenticity(preview, context)
        except OracleUnavailableError as exc:
            Log.warning(f"AI analysis unavailable for {bundle.file_name}: {exc}")
            return CheckResult(note=str(exc) or "AI analysis unavailable")
        except OracleError as exc:
            Log.warning(f"AI analysis inconclusive for {bundle.file_name}: {exc}")
            return CheckResult(note="AI analysis inconclusive")

        passed = verdict.authentic is not False or verdict.confidence > self._ai_confidence_override
        reason = None
        if not passed:
            detail = verdict.summary or ", ".join(verdict.issues) or "signs of tampering"
            reason = f"AI analysis flagged the document: {detail}"
        return CheckResult(
            passed=passed,
            reason=reason,
            confidence=verdict.confidence,
            issues=verdict.issues,
            summary=verdict.summary or None,
            authentic=verdict.authentic,
        )

    def _restricted_editor(self, metadata: dict[str, Any]) -> str | None:
        for key in ("software", "creator", "producer"):
            value = metadata.get(key)
            if not isinstance(value, str):
                continue
            lowered = value.lower()
            if any(editor in lowered for editor in self._restricted_editors):
                return value
        return None

    def _is_rapid_edit(self, metadata: dict[str, Any]) -> bool:
        created_raw = metadata.get("createDate")
        modified_raw = metadata.get("modifyDate")
        if not isinstance(created_raw, str) or not isinstance(modified_raw, str):
            return False
        created = parse_metadata_date(created_raw)
        modified = parse_metadata_date(modified_raw)
        if created is None or modified is None:
            return False
        delta = (modified - created).total_seconds()
        return 0 <= delta < self._rapid_edit_seconds
