import re
from typing import ClassVar

from docvault.verification.models import ScanResult


class ContentScanner:
    """Scans the start of active-content formats for injected script or SQL.

    Payloads of this class sit near the start of the structure for the
    scanned formats, so only a bounded prefix is examined.
    """

    SCANNED_TYPES: ClassVar[frozenset[str]] = frozenset({"application/pdf"})

    PATTERN_FAMILIES: ClassVar[tuple[tuple[str, tuple[re.Pattern[str], ...]], ...]] = (
        (
            "script injection",
            (
                re.compile(r"<script", re.IGNORECASE),
                re.compile(r"\beval\s*\(", re.IGNORECASE),
                re.compile(r"\bon(?:error|load|click)\s*=", re.IGNORECASE),
            ),
        ),
        (
            "embedded PDF JavaScript action",
            (
                re.compile(r"/JavaScript\b"),
                re.compile(r"/JS\b"),
            ),
        ),
        (
            "DOM or cookie access",
            (
                re.compile(r"document\.(?:cookie|write|domain)", re.IGNORECASE),
                re.compile(r"window\.location", re.IGNORECASE),
            ),
        ),
        (
            "SQL injection",
            (
                re.compile(r"\bUNION\s+SELECT\b", re.IGNORECASE),
                re.compile(r"\bSELECT\b.{1,200}?\bFROM\b", re.IGNORECASE | re.DOTALL),
                re.compile(r"\bDROP\s+TABLE\b", re.IGNORECASE),
                re.compile(r"\bINSERT\s+INTO\b", re.IGNORECASE),
            ),
        ),
    )

    def __init__(self, window_bytes: int = 64 * 1024) -> None:
        self._window_bytes = window_bytes

    def scan(self, window: bytes) -> ScanResult:
        """Return unsafe with the first matching pattern family as reason.

        Callers decide whether the format is scanned at all; see SCANNED_TYPES.
        """
        text = window[: self._window_bytes].decode("latin-1")
        for category, patterns in self.PATTERN_FAMILIES:
            for pattern in patterns:
                if pattern.search(text):
                    return ScanResult(safe=False, reason=f"Malicious content detected: {category}")
        return ScanResult(safe=True)
