"""Pytest configuration for pdfsuite tests.

Provides factories for small labelled PDFs (each page draws "Page N" so
tests can check which source page ended up where) and an isolated
configuration directory.
"""

import io
import re

import pikepdf
import pytest

_LABEL_RE = re.compile(rb"\(Page (\d+)\)")


def create_test_pdf(path, num_pages: int = 3, media_box=(0, 0, 612, 792)) -> str:
    """Create a simple labelled PDF with the given number of pages."""
    pdf = pikepdf.Pdf.new()
    for i in range(num_pages):
        page = pikepdf.Page(
            pikepdf.Dictionary(
                Type=pikepdf.Name.Page,
                MediaBox=list(media_box),
                Contents=pdf.make_stream(f"BT /F1 12 Tf 100 700 Td (Page {i + 1}) Tj ET".encode()),
            )
        )
        pdf.pages.append(page)
    pdf.save(str(path))
    return str(path)


def page_labels(source) -> list[int]:
    """Return the "Page N" label of every page, in order.

    Args:
        source: Path to a PDF, or the PDF as bytes.
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    labels = []
    with pikepdf.open(source) as pdf:
        for page in pdf.pages:
            contents = page.obj.Contents
            if isinstance(contents, pikepdf.Array):
                data = b"".join(s.read_bytes() for s in contents)
            else:
                data = contents.read_bytes()
            match = _LABEL_RE.search(data)
            labels.append(int(match.group(1)) if match else 0)
    return labels


@pytest.fixture
def make_pdf(tmp_path):
    """Factory fixture: ``make_pdf(num_pages, name="input.pdf")`` -> path."""

    def _make(num_pages: int = 3, name: str = "input.pdf", **kwargs) -> str:
        return create_test_pdf(tmp_path / name, num_pages, **kwargs)

    return _make


@pytest.fixture
def pdf_bytes():
    """Factory fixture returning a labelled PDF as bytes."""

    def _make(num_pages: int = 3) -> bytes:
        buf = io.BytesIO()
        pdf = pikepdf.Pdf.new()
        for i in range(num_pages):
            pdf.pages.append(
                pikepdf.Page(
                    pikepdf.Dictionary(
                        Type=pikepdf.Name.Page,
                        MediaBox=[0, 0, 612, 792],
                        Contents=pdf.make_stream(
                            f"BT /F1 12 Tf 100 700 Td (Page {i + 1}) Tj ET".encode()
                        ),
                    )
                )
            )
        pdf.save(buf)
        return buf.getvalue()

    return _make


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the global ConfigManager at a throwaway settings file."""
    from pdfsuite.utils import config_manager

    manager = config_manager.ConfigManager(config_path=str(tmp_path / "config" / "settings.json"))
    monkeypatch.setattr(config_manager, "_config_manager", manager)
    return manager
