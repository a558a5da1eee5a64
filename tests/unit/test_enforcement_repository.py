from unittest.mock import MagicMock, patch

from psycopg.types.json import Jsonb

from docvault.database.models import AccountFlag, BlacklistEntry, SecurityEvent
from docvault.database.repositories.enforcement_repository import EnforcementRepository


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestInsertAccountFlag:
    @patch("docvault.database.repositories.enforcement_repository.get_connection")
    def test_inserts_suspension_flag(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        EnforcementRepository().insert_account_flag(
            AccountFlag(user_id="user-1", reason="signature mismatch", flagged_document_name="fake.pdf")
        )

        query, params = mock_conn.execute.call_args.args
        assert "INSERT INTO account_flags" in query
        assert params == ("user-1", "suspended", "signature mismatch", "fake.pdf")
        mock_conn.commit.assert_called_once()


class TestInsertSecurityEvent:
    @patch("docvault.database.repositories.enforcement_repository.get_connection")
    def test_wraps_metadata_as_jsonb(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        EnforcementRepository().insert_security_event(
            SecurityEvent(
                user_id="user-1",
                event_type="fraud_detected",
                event_description="Fraudulent document upload detected",
                metadata={"file_name": "fake.pdf"},
            )
        )

        _query, params = mock_conn.execute.call_args.args
        assert params[:3] == ("user-1", "fraud_detected", "Fraudulent document upload detected")
        assert isinstance(params[3], Jsonb)
        assert params[3].obj == {"file_name": "fake.pdf"}


class TestBlacklist:
    @patch("docvault.database.repositories.enforcement_repository.get_connection")
    def test_upsert_lowercases_email(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        EnforcementRepository().upsert_blacklist(
            BlacklistEntry(email="Mallory@Example.COM", reason="Fraudulent upload", associated_user_id="user-1")
        )

        query, params = mock_conn.execute.call_args.args
        assert "ON CONFLICT (email) DO UPDATE" in query
        assert params == ("mallory@example.com", "Fraudulent upload", "user-1")
        mock_conn.commit.assert_called_once()

    @patch("docvault.database.repositories.enforcement_repository.get_connection")
    def test_is_email_blacklisted(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (1,)

        assert EnforcementRepository().is_email_blacklisted("MALLORY@example.com") is True
        assert mock_cursor.execute.call_args.args[1] == ("mallory@example.com",)

    @patch("docvault.database.repositories.enforcement_repository.get_connection")
    def test_unknown_email_is_not_blacklisted(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert EnforcementRepository().is_email_blacklisted("alice@example.com") is False
