import io
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def _render_pdf(draw: Callable[[canvas.Canvas], None] | None = None) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter, pageCompression=0, invariant=1)
    if draw is not None:
        draw(c)
    else:
        c.drawString(72, 720, "Quarterly statement")
    c.showPage()
    c.save()
    return buf.getvalue()


def build_jpeg(exif_text: str | None = None, body: bytes = b"\x00" * 64) -> bytes:
    """Assemble a minimal JPEG byte stream, optionally carrying an EXIF APP1 segment."""
    out = bytearray(b"\xff\xd8")
    out += b"\xff\xe0" + (16).to_bytes(2, "big") + b"JFIF\x00" + b"\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    if exif_text is not None:
        payload = b"Exif\x00\x00" + exif_text.encode("latin-1")
        out += b"\xff\xe1" + (len(payload) + 2).to_bytes(2, "big") + payload
    out += b"\xff\xda" + (8).to_bytes(2, "big") + b"\x03\x01\x00\x02\x11\x03"
    out += body
    out += b"\xff\xd9"
    return bytes(out)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-revision PDF with known text content."""
    return _render_pdf()


@pytest.fixture()
def edited_pdf_bytes(sample_pdf_bytes: bytes) -> bytes:
    """A PDF with an appended incremental update section."""
    return sample_pdf_bytes + b"\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


@pytest.fixture()
def photoshop_pdf_bytes() -> bytes:
    """A PDF whose Info dictionary names an image editor as creator."""

    def draw(c: canvas.Canvas) -> None:
        c.setCreator("Adobe Photoshop 25.0")
        c.drawString(72, 720, "Certificate of completion")

    return _render_pdf(draw)


@pytest.fixture()
def annotated_pdf_bytes() -> bytes:
    """A PDF with a link annotation on its page."""

    def draw(c: canvas.Canvas) -> None:
        c.drawString(72, 720, "See the portal")
        c.linkURL("https://example.com", (72, 700, 200, 730), relative=0)

    return _render_pdf(draw)


@pytest.fixture()
def script_pdf_bytes() -> bytes:
    """A PDF whose uncompressed content stream carries a script tag."""

    def draw(c: canvas.Canvas) -> None:
        c.drawString(72, 720, "<script>alert('x')</script>")

    return _render_pdf(draw)


@pytest.fixture()
def plain_jpeg_bytes() -> bytes:
    return build_jpeg()


@pytest.fixture()
def photoshop_jpeg_bytes() -> bytes:
    return build_jpeg("MM\x00*\x00\x00\x00\x08Adobe Photoshop 25.1 (Windows)\x00")


@pytest.fixture()
def jpeg_factory() -> Callable[..., bytes]:
    return build_jpeg
