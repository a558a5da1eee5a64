"""Magic-byte check of a file's real format against its declared MIME type."""

from typing import ClassVar

from docvault.verification.models import canonical_mime_type


class SignatureVerifier:
    """Accepts a file only when its leading bytes match its declared type.

    An unknown MIME type is a failure, not an unknown: the vault only
    stores formats it can vouch for.
    """

    SIGNATURES: ClassVar[dict[str, tuple[bytes, ...]]] = {
        "application/pdf": (b"%PDF",),
        "image/jpeg": (b"\xff\xd8\xff",),
        "image/png": (b"\x89PNG",),
        "image/webp": (b"RIFF",),
        "application/msword": (b"\xd0\xcf\x11\xe0",),
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
            b"PK\x03\x04",
        ),
    }

    MIN_HEAD_BYTES = 8

    def accepts(self, mime_type: str) -> bool:
        return canonical_mime_type(mime_type) in self.SIGNATURES

    def verify(self, mime_type: str, head: bytes) -> bool:
        """Return True iff one of the declared type's signatures prefixes head."""
        prefixes = self.SIGNATURES.get(canonical_mime_type(mime_type))
        if not prefixes:
            return False
        return any(head.startswith(prefix) for prefix in prefixes)
