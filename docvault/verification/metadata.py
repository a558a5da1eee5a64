"""Format-specific metadata extraction from a bounded byte window.

Extraction never raises: a field that cannot be found is left unset.

PDF: the Info dictionary literal strings (/Producer, /Creator, /CreationDate,
/ModDate) plus structural flags. More than one %%EOF marker means the file
was saved incrementally after it was first written.

JPEG: the EXIF APP1 segment is located by walking the 2-byte markers from
offset 2; its first bytes are matched against known editor signatures.
"""

import base64
import re
from typing import ClassVar

from docvault.logging.logger import Log
from docvault.verification.models import DocumentMetadata, canonical_mime_type

_PDF_STRING = r"\(((?:\\.|[^\\)])*)\)"
_PDF_ESCAPE = re.compile(r"\\(.)", re.DOTALL)

_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})

_APP1 = 0xE1
_START_OF_SCAN = 0xDA


class MetadataExtractor:
    """Extracts PDF Info fields and image editor signatures."""

    PDF_FIELDS: ClassVar[dict[str, re.Pattern[bytes]]] = {
        name: re.compile(rf"/{name}\s*{_PDF_STRING}".encode("ascii"))
        for name in ("Producer", "Creator", "CreationDate", "ModDate")
    }

    EDITOR_SIGNATURES: ClassVar[tuple[tuple[str, re.Pattern[str]], ...]] = (
        ("Adobe Photoshop", re.compile(r"photoshop", re.IGNORECASE)),
        ("Adobe Illustrator", re.compile(r"illustrator", re.IGNORECASE)),
        ("Adobe Lightroom", re.compile(r"lightroom", re.IGNORECASE)),
        ("GIMP", re.compile(r"\bgimp\b", re.IGNORECASE)),
        ("Paint.NET", re.compile(r"paint\.net", re.IGNORECASE)),
        ("Pixlr", re.compile(r"pixlr", re.IGNORECASE)),
        ("Canva", re.compile(r"\bcanva\b", re.IGNORECASE)),
        ("Affinity Photo", re.compile(r"affinity\s+photo", re.IGNORECASE)),
        ("Corel", re.compile(r"corel", re.IGNORECASE)),
        ("Inkscape", re.compile(r"inkscape", re.IGNORECASE)),
    )

    def __init__(
        self,
        window_bytes: int = 256 * 1024,
        exif_scan_bytes: int = 2000,
        preview_max_bytes: int = 4 * 1024 * 1024,
    ) -> None:
        self._window_bytes = window_bytes
        self._exif_scan_bytes = exif_scan_bytes
        self._preview_max_bytes = preview_max_bytes

    def extract(self, mime_type: str, data: bytes) -> DocumentMetadata:
        mime = canonical_mime_type(mime_type)
        window = data[: self._window_bytes]
        try:
            if mime == "application/pdf":
                return self._extract_pdf(window)
            if mime in _IMAGE_TYPES:
                return self._extract_image(mime, window, data)
        except Exception as exc:  # noqa: BLE001
            Log.warning(f"Metadata extraction failed for {mime}: {exc}")
        return DocumentMetadata()

    def find_editor(self, text: str) -> str | None:
        """Return the first known editor named in text."""
        for name, pattern in self.EDITOR_SIGNATURES:
            if pattern.search(text):
                return name
        return None

    def _extract_pdf(self, window: bytes) -> DocumentMetadata:
        fields = {name: self._pdf_field(pattern, window) for name, pattern in self.PDF_FIELDS.items()}
        producer = fields["Producer"]
        creator = fields["Creator"]
        software = None
        for candidate in (producer, creator):
            if candidate and software is None:
                software = self.find_editor(candidate)
        return DocumentMetadata(
            producer=producer,
            creator=creator,
            creation_date=fields["CreationDate"],
            mod_date=fields["ModDate"],
            software=software,
            is_pdf=True,
            eof_count=window.count(b"%%EOF"),
            has_annotations=b"/Annot" in window,
            has_form_fields=b"/AcroForm" in window,
        )

    def _extract_image(self, mime: str, window: bytes, data: bytes) -> DocumentMetadata:
        metadata = DocumentMetadata()
        if mime == "image/jpeg":
            segment = self._find_exif_segment(window)
            if segment is not None:
                metadata.software = self.find_editor(
                    segment[: self._exif_scan_bytes].decode("latin-1")
                )
        if len(data) <= self._preview_max_bytes:
            metadata.base64_preview = base64.b64encode(data).decode("ascii")
        return metadata

    @staticmethod
    def _pdf_field(pattern: re.Pattern[bytes], window: bytes) -> str | None:
        match = pattern.search(window)
        if match is None:
            return None
        raw = match.group(1).decode("latin-1")
        return _PDF_ESCAPE.sub(r"\1", raw).strip() or None

    @staticmethod
    def _find_exif_segment(data: bytes) -> bytes | None:
        offset = 2
        while offset + 4 <= len(data):
            if data[offset] != 0xFF:
                return None
            marker = data[offset + 1]
            if marker == _START_OF_SCAN:
                return None
            length = int.from_bytes(data[offset + 2 : offset + 4], "big")
            if length < 2:
                return None
            if marker == _APP1:
                return data[offset + 4 : offset + 2 + length]
            offset += 2 + length
        return None
