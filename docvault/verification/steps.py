import asyncio

from docvault.logging.logger import Log
from docvault.verification.content_scanner import ContentScanner
from docvault.verification.exceptions import ServiceUnavailableError
from docvault.verification.fingerprint import fingerprint
from docvault.verification.metadata import MetadataExtractor
from docvault.verification.models import StepStatus
from docvault.verification.pipeline import Halt, PipelineContext, PipelineStep
from docvault.verification.schemas import CheckResult, VerificationBundle
from docvault.verification.service_client import VerificationBackendClient
from docvault.verification.signature import SignatureVerifier

SIGNATURE_MISMATCH = "signature mismatch"

CATEGORY_TAMPERED = "tampered"
CATEGORY_MALICIOUS = "malicious content"
CATEGORY_FAILED_VERIFICATION = "failed verification"

SERVICE_UNAVAILABLE = "Verification service unavailable"


class SignatureStep(PipelineStep):
    def __init__(self, verifier: SignatureVerifier, window_bytes: int = 16) -> None:
        self._verifier = verifier
        self._window_bytes = max(window_bytes, SignatureVerifier.MIN_HEAD_BYTES)

    async def run(self, context: PipelineContext) -> PipelineContext:
        entry = context.step("signature")
        entry.start()
        mime_type = context.file.mime_type
        if self._verifier.verify(mime_type, context.file.head(self._window_bytes)):
            entry.finish(StepStatus.PASSED, f"Content matches declared type {mime_type}")
            return context

        if self._verifier.accepts(mime_type):
            detail = f"File content does not match declared type {mime_type}"
        else:
            detail = f"Declared type {mime_type} is not accepted"
        entry.finish(StepStatus.FAILED, detail)
        context.halt = Halt(CATEGORY_TAMPERED, SIGNATURE_MISMATCH)
        Log.warning(f"Signature check failed for {context.file.name}: {detail}")
        return context


class ContentScanStep(PipelineStep):
    def __init__(self, scanner: ContentScanner, window_bytes: int = 64 * 1024) -> None:
        self._scanner = scanner
        self._window_bytes = window_bytes

    async def run(self, context: PipelineContext) -> PipelineContext:
        entry = context.step("content")
        entry.start()
        mime_type = context.file.mime_type
        if mime_type not in self._scanner.SCANNED_TYPES:
            entry.finish(StepStatus.SKIPPED, f"No active content scan for {mime_type}")
            return context

        result = self._scanner.scan(context.file.head(self._window_bytes))
        if result.safe:
            entry.finish(StepStatus.PASSED, "No embedded scripts or injection patterns")
            return context

        reason = result.reason or "Malicious content detected"
        entry.finish(StepStatus.FAILED, reason)
        context.halt = Halt(CATEGORY_MALICIOUS, reason)
        Log.warning(f"Content scan rejected {context.file.name}: {reason}")
        return context


class FingerprintStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        entry = context.step("hash")
        entry.start()
        context.sha256_hash = await asyncio.to_thread(fingerprint, context.file.data)
        entry.finish(StepStatus.PASSED, f"SHA-256 {context.sha256_hash}")
        return context


class MetadataStep(PipelineStep):
    def __init__(self, extractor: MetadataExtractor) -> None:
        self._extractor = extractor

    async def run(self, context: PipelineContext) -> PipelineContext:
        entry = context.step("metadata")
        entry.start()
        context.metadata = self._extractor.extract(context.file.mime_type, context.file.data)
        editor = context.metadata.software
        if editor:
            detail = f"Created or modified with {editor}"
            entry.finish(StepStatus.WARNING, detail)
            context.warn(detail)
        else:
            entry.finish(StepStatus.PASSED, "No editing software signatures found")
        return context


class PdfStructureStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        entry = context.step("pdf")
        entry.start()
        metadata = context.metadata
        if not metadata.is_pdf:
            entry.finish(StepStatus.SKIPPED, "Not a PDF document")
            return context

        if metadata.has_incremental_saves:
            detail = (
                f"Incremental saves detected ({metadata.eof_count} %%EOF markers); "
                "document was edited after it was first written"
            )
            entry.finish(StepStatus.WARNING, detail)
            context.warn(detail)
            return context

        features = metadata.pdf_features()
        if features:
            entry.finish(StepStatus.PASSED, f"Single revision; contains {', '.join(features)}")
        else:
            entry.finish(StepStatus.PASSED, "Single revision; no annotations or form fields")
        return context


class ServerVerificationStep(PipelineStep):
    """Sends the bundle to the verification service and maps its verdict.

    hashCheck and duplicateCheck own the duplicate entry; metadataCheck and
    aiAnalysis own the ai entry. An unreachable service skips both entries
    and lets the upload continue.
    """

    def __init__(self, client: VerificationBackendClient) -> None:
        self._client = client

    async def run(self, context: PipelineContext) -> PipelineContext:
        duplicate = context.step("duplicate")
        ai = context.step("ai")
        duplicate.start()
        ai.start()

        bundle = VerificationBundle.build(
            sha256_hash=context.sha256_hash,
            file_name=context.file.name,
            file_size=context.file.size,
            mime_type=context.file.mime_type,
            metadata=context.metadata.to_payload(),
        )
        try:
            verdict = await self._client.verify(bundle)
        except ServiceUnavailableError as exc:
            Log.warning(f"Server verification skipped for {context.file.name}: {exc}")
            duplicate.finish(StepStatus.SKIPPED, SERVICE_UNAVAILABLE)
            ai.finish(StepStatus.SKIPPED, SERVICE_UNAVAILABLE)
            return context

        context.verdict = verdict
        results = verdict.results
        self._finish_duplicate(context, results.hash_check, results.duplicate_check)
        self._finish_ai(context, results.metadata_check, results.ai_analysis)

        failures = [
            f"{name}: {result.reason or 'failed'}"
            for name, result in results.checks()
            if not result.passed
        ]
        if failures:
            context.halt = Halt(CATEGORY_FAILED_VERIFICATION, "; ".join(failures))
            Log.warning(f"Server verification rejected {context.file.name}: {failures}")
        return context

    def _finish_duplicate(
        self, context: PipelineContext, hash_check: CheckResult, duplicate_check: CheckResult
    ) -> None:
        entry = context.step("duplicate")
        reasons = _failure_reasons(hash_check, duplicate_check)
        if reasons:
            entry.finish(StepStatus.FAILED, "; ".join(reasons))
        else:
            entry.finish(StepStatus.PASSED, "No prior flags or mass duplicates")

    def _finish_ai(
        self, context: PipelineContext, metadata_check: CheckResult, ai_analysis: CheckResult
    ) -> None:
        entry = context.step("ai")
        reasons = _failure_reasons(metadata_check, ai_analysis)
        if reasons:
            entry.finish(StepStatus.FAILED, "; ".join(reasons))
            return
        if metadata_check.warning:
            entry.finish(StepStatus.WARNING, metadata_check.warning)
            context.warn(metadata_check.warning)
            return
        if ai_analysis.note:
            entry.finish(StepStatus.SKIPPED, ai_analysis.note)
            return
        summary = ai_analysis.summary or "Document appears authentic"
        if ai_analysis.confidence is not None:
            summary = f"{summary} (confidence {ai_analysis.confidence:g})"
        entry.finish(StepStatus.PASSED, summary)


def _failure_reasons(*results: CheckResult) -> list[str]:
    return [result.reason or "check failed" for result in results if not result.passed]
