from dataclasses import dataclass, field


@dataclass(frozen=True)
class AuthenticityContext:
    """File facts sent to the oracle alongside the preview."""

    file_name: str
    mime_type: str
    file_size: int


@dataclass(frozen=True)
class OracleVerdict:
    """Structured opinion returned by the authenticity oracle."""

    authentic: bool | None
    confidence: float
    issues: list[str] = field(default_factory=list)
    summary: str = ""
