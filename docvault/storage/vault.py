import base64
from dataclasses import dataclass

from docvault.database.models import DocumentRecord
from docvault.database.repositories.documents_repository import DocumentsRepository
from docvault.logging.logger import Log
from docvault.storage.base import BaseBlobStore
from docvault.storage.encryption import EncryptedDocument
from docvault.verification.models import FileDescriptor


@dataclass(frozen=True)
class StoredDocument:
    path: str
    document_id: str


class DocumentVault:
    """Uploads an encrypted document and records its metadata row."""

    def __init__(self, blob_store: BaseBlobStore, documents_repo: DocumentsRepository) -> None:
        self._blob_store = blob_store
        self._documents_repo = documents_repo

    def save(
        self,
        user_id: str,
        file: FileDescriptor,
        encrypted: EncryptedDocument,
        sha256_hash: str,
    ) -> StoredDocument:
        path = self._blob_store.put(user_id, file.name, encrypted.ciphertext)
        try:
            document_id = self._documents_repo.insert_document(
                DocumentRecord(
                    user_id=user_id,
                    file_name=file.name,
                    file_path=path,
                    file_size=file.size,
                    mime_type=file.mime_type,
                    source="upload",
                    encryption_iv=base64.b64encode(encrypted.iv).decode("ascii"),
                    encryption_key_hash=encrypted.key_hash,
                    sha256_hash=sha256_hash,
                )
            )
        except Exception:
            Log.warning(f"Recording document for user {user_id} failed, removing blob {path}")
            self._blob_store.delete(path)
            raise
        Log.info(f"Stored document {document_id} for user {user_id} at {path}")
        return StoredDocument(path=path, document_id=document_id)
