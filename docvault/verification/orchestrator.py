import asyncio
from pathlib import Path

from docvault.config.settings import Settings
from docvault.database.repositories.documents_repository import DocumentsRepository
from docvault.logging.logger import Log
from docvault.storage.encryption import encrypt_document
from docvault.storage.local_store import LocalBlobStore
from docvault.storage.vault import DocumentVault
from docvault.verification.content_scanner import ContentScanner
from docvault.verification.exceptions import (
    DocumentStorageError,
    FileTooLargeError,
    ServiceUnavailableError,
)
from docvault.verification.metadata import MetadataExtractor
from docvault.verification.models import (
    FileDescriptor,
    Rejection,
    StepStatus,
    UploadResult,
    UploadStatus,
    advance_upload,
    new_report,
)
from docvault.verification.pipeline import Halt, PipelineContext, PipelineStep
from docvault.verification.service_client import VerificationBackendClient
from docvault.verification.signature import SignatureVerifier
from docvault.verification.steps import (
    ContentScanStep,
    FingerprintStep,
    MetadataStep,
    PdfStructureStep,
    ServerVerificationStep,
    SignatureStep,
)

NOT_RUN = "Not run: pipeline halted"


class VerificationOrchestrator:
    """Runs the verification pipeline for one upload attempt at a time.

    Pipeline: signature -> content -> hash -> metadata -> pdf -> server
    verdict -> encrypt -> upload. The first failed step halts the run,
    every step left pending is reported as skipped, and the account is
    flagged exactly once.
    """

    def __init__(
        self,
        *,
        steps: list[PipelineStep],
        backend: VerificationBackendClient,
        vault: DocumentVault,
        max_file_size_bytes: int,
    ) -> None:
        self._steps = steps
        self._backend = backend
        self._vault = vault
        self._max_file_size_bytes = max_file_size_bytes

    async def run(self, user_id: str, file: FileDescriptor, vault_key: bytes) -> UploadResult:
        """Verify a file and, if nothing failed, encrypt and store it.

        Raises:
            FileTooLargeError: if the file exceeds the upload limit; nothing is run.
            DocumentStorageError: if the verified file could not be stored.
        """
        if file.size > self._max_file_size_bytes:
            raise FileTooLargeError(
                f"{file.name} is {file.size} bytes; limit is {self._max_file_size_bytes}"
            )

        status = advance_upload(UploadStatus.IDLE, UploadStatus.VERIFYING)
        context = PipelineContext(user_id=user_id, file=file, steps=new_report())
        Log.info(f"Verifying {file.name} ({file.mime_type}, {file.size} bytes) for user {user_id}")

        for step in self._steps:
            await step.run(context)
            if context.halt is not None:
                break

        for entry in context.steps:
            if entry.status is StepStatus.PENDING:
                entry.skip(NOT_RUN)

        if context.halt is not None:
            flagged = await self._enforce(context, context.halt)
            status = advance_upload(status, UploadStatus.ERROR)
            rejection = Rejection(
                category=context.halt.category,
                reason=context.halt.reason,
                account_flagged=flagged,
            )
            Log.warning(f"Upload of {file.name} rejected: {rejection.message}")
            return UploadResult(
                status=status,
                steps=context.steps,
                sha256_hash=context.sha256_hash or None,
                rejection=rejection,
                warnings=context.warnings,
            )

        status = advance_upload(status, UploadStatus.ENCRYPTING)
        encrypted = await asyncio.to_thread(encrypt_document, file.data, vault_key)

        status = advance_upload(status, UploadStatus.UPLOADING)
        try:
            stored = await asyncio.to_thread(
                self._vault.save, user_id, file, encrypted, context.sha256_hash
            )
        except Exception as exc:
            status = advance_upload(status, UploadStatus.ERROR)
            Log.exception(f"Storing {file.name} for user {user_id} failed")
            raise DocumentStorageError(f"Could not store {file.name}: {exc}", status) from exc

        status = advance_upload(status, UploadStatus.SUCCESS)
        Log.info(f"Upload of {file.name} verified and stored ({len(context.warnings)} warnings)")
        return UploadResult(
            status=status,
            steps=context.steps,
            sha256_hash=context.sha256_hash,
            storage_path=stored.path,
            document_id=stored.document_id,
            warnings=context.warnings,
        )

    async def _enforce(self, context: PipelineContext, halt: Halt) -> bool:
        """Flag the account once for this attempt. Returns whether it was suspended."""
        try:
            result = await self._backend.flag_account(
                user_id=context.user_id,
                reason=halt.reason,
                file_name=context.file.name,
                sha256_hash=context.sha256_hash or None,
            )
        except ServiceUnavailableError as exc:
            Log.error(f"Enforcement for user {context.user_id} could not be delivered: {exc}")
            return False
        return result.core_succeeded


def build_orchestrator(
    settings: Settings,
    access_token: str | None = None,
    files_root: Path | None = None,
) -> VerificationOrchestrator:
    """Build an orchestrator with the default steps and collaborators."""
    backend = VerificationBackendClient(
        verify_url=settings.verification_service_url,
        enforce_url=settings.enforcement_service_url,
        access_token=access_token if access_token is not None else settings.access_token,
        timeout_seconds=settings.service_timeout_seconds,
    )
    extractor = MetadataExtractor(
        window_bytes=settings.metadata_window_bytes,
        exif_scan_bytes=settings.exif_scan_bytes,
        preview_max_bytes=settings.preview_max_bytes,
    )
    steps: list[PipelineStep] = [
        SignatureStep(SignatureVerifier(), window_bytes=settings.signature_window_bytes),
        ContentScanStep(
            ContentScanner(window_bytes=settings.content_scan_window_bytes),
            window_bytes=settings.content_scan_window_bytes,
        ),
        FingerprintStep(),
        MetadataStep(extractor),
        PdfStructureStep(),
        ServerVerificationStep(backend),
    ]
    blob_store = LocalBlobStore(
        files_root=files_root if files_root is not None else Path(settings.vault_files_root)
    )
    return VerificationOrchestrator(
        steps=steps,
        backend=backend,
        vault=DocumentVault(blob_store, DocumentsRepository()),
        max_file_size_bytes=settings.max_file_size_bytes,
    )
