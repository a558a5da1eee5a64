from psycopg.rows import dict_row

from docvault.database.connection import get_connection
from docvault.database.models import DocumentRecord


class DocumentsRepository:
    """Database operations for the documents table."""

    def insert_document(self, record: DocumentRecord) -> str:
        """Persist the metadata row of an encrypted vault document.

        Returns:
            The generated document ID.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO documents
                        (user_id, file_name, file_path, file_size, mime_type, source,
                         encryption_iv, encryption_key_hash, sha256_hash)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        record.user_id,
                        record.file_name,
                        record.file_path,
                        record.file_size,
                        record.mime_type,
                        record.source,
                        record.encryption_iv,
                        record.encryption_key_hash,
                        record.sha256_hash,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert of document {record.file_name!r} returned no id")
        return str(row["id"])
