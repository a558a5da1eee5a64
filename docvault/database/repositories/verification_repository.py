from psycopg.rows import dict_row

from docvault.database.connection import get_connection
from docvault.database.models import DocumentHashRecord, HashLookup


class VerificationRepository:
    """Database operations for the document_hashes table."""

    def lookup_hash(self, sha256_hash: str) -> HashLookup:
        """Return whether any upload of this content has been flagged."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT flag_reason
                    FROM document_hashes
                    WHERE sha256_hash = %s
                      AND is_flagged
                    ORDER BY created_at DESC
                    LIMIT 1
                    """,
                    (sha256_hash,),
                )
                row = cur.fetchone()

        if row is None:
            return HashLookup()
        return HashLookup(is_flagged=True, flag_reason=row["flag_reason"])

    def count_distinct_uploaders(self, sha256_hash: str, exclude_user_id: str | None = None) -> int:
        """Count distinct users who have uploaded content with this hash.

        Args:
            sha256_hash: Content hash to look up.
            exclude_user_id: User left out of the count, usually the uploader.
        """
        query = """
            SELECT COUNT(DISTINCT user_id)
            FROM document_hashes
            WHERE sha256_hash = %s
        """
        params: tuple[str, ...] = (sha256_hash,)
        if exclude_user_id is not None:
            query += " AND user_id <> %s"
            params += (exclude_user_id,)

        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                row = cur.fetchone()

        if row is None or row[0] is None:
            return 0
        return int(row[0])

    def record_hash(self, record: DocumentHashRecord) -> None:
        """Append a hash check record for future duplicate lookups."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO document_hashes
                    (sha256_hash, user_id, file_name, file_size, is_flagged, flag_reason)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    record.sha256_hash,
                    record.user_id,
                    record.file_name,
                    record.file_size,
                    record.is_flagged,
                    record.flag_reason,
                ),
            )
            conn.commit()
