from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DocumentHashRecord:
    """Represents a row from the document_hashes table."""

    sha256_hash: str
    user_id: str
    file_name: str
    file_size: int
    is_flagged: bool = False
    flag_reason: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class HashLookup:
    """Flag state for one content hash across all uploaders."""

    is_flagged: bool = False
    flag_reason: str | None = None


@dataclass
class AccountFlag:
    """Represents a row from the account_flags table."""

    user_id: str
    reason: str
    flag_type: str = "suspended"
    flagged_document_name: str | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None
    resolved_by: str | None = None


@dataclass
class SecurityEvent:
    """Represents a row from the security_events table."""

    user_id: str
    event_type: str
    event_description: str
    metadata: dict[str, object] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None


@dataclass
class BlacklistEntry:
    """Represents a row from the blacklisted_emails table."""

    email: str
    reason: str
    associated_user_id: str | None = None
    blacklisted_at: datetime | None = None


@dataclass
class DocumentRecord:
    """Represents a row from the documents table."""

    user_id: str
    file_name: str
    file_path: str
    file_size: int
    mime_type: str
    source: str = "upload"
    encryption_iv: str | None = None
    encryption_key_hash: str | None = None
    sha256_hash: str | None = None
    id: str | None = None
    created_at: datetime | None = None
