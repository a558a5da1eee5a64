from psycopg.types.json import Jsonb

from docvault.database.connection import get_connection
from docvault.database.models import AccountFlag, BlacklistEntry, SecurityEvent


class EnforcementRepository:
    """Database operations for account_flags, security_events and blacklisted_emails.

    All writes are append or upsert only; resolving a flag is an
    administrative action outside this repository.
    """

    def insert_account_flag(self, flag: AccountFlag) -> None:
        """Record a flag against a user account."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO account_flags (user_id, flag_type, reason, flagged_document_name)
                VALUES (%s, %s, %s, %s)
                """,
                (flag.user_id, flag.flag_type, flag.reason, flag.flagged_document_name),
            )
            conn.commit()

    def insert_security_event(self, event: SecurityEvent) -> None:
        """Append an audit record to the security event log."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO security_events
                    (user_id, event_type, event_description, metadata, ip_address, user_agent)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    event.user_id,
                    event.event_type,
                    event.event_description,
                    Jsonb(event.metadata),
                    event.ip_address,
                    event.user_agent,
                ),
            )
            conn.commit()

    def upsert_blacklist(self, entry: BlacklistEntry) -> None:
        """Insert or refresh a blacklist entry keyed by lower-cased email."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO blacklisted_emails (email, reason, associated_user_id)
                VALUES (%s, %s, %s)
                ON CONFLICT (email) DO UPDATE
                SET reason = EXCLUDED.reason,
                    associated_user_id = EXCLUDED.associated_user_id,
                    blacklisted_at = NOW()
                """,
                (entry.email.lower(), entry.reason, entry.associated_user_id),
            )
            conn.commit()

    def is_email_blacklisted(self, email: str) -> bool:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT 1 FROM blacklisted_emails WHERE email = %s",
                    (email.lower(),),
                )
                row = cur.fetchone()
        return row is not None
