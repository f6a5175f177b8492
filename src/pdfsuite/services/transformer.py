"""
PdfSuite - Page-Set Transformer

Builds new documents from a caller-supplied selection of a source
document's pages:

  - COMBINED: one document holding the selection in order
  - SEPARATE: one single-page document per selected index, optionally
    bundled into an archive

A request either fully succeeds or raises; no partial output is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from pdfsuite.config import (
    DEFAULT_ARCHIVE_NAME,
    DEFAULT_COMBINED_NAME,
    PDF_EXTENSION,
    SEPARATE_PAGE_TEMPLATE,
)
from pdfsuite.services.archive import ArchivePacker, ZipArchivePacker
from pdfsuite.services.document_engine import DocumentEngine
from pdfsuite.services.page_selection import validate_selection
from pdfsuite.utils.exceptions import TransformAbortedError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
AbortCheck = Callable[[], bool]


class TransformMode(Enum):
    """How the selected pages are laid out in the output."""

    COMBINED = auto()
    SEPARATE = auto()


class Packaging(Enum):
    """Whether separate outputs are bundled into one archive."""

    NONE = auto()
    ARCHIVE = auto()


@dataclass
class TransformRequest:
    """A single page-set transformation.

    Attributes:
        source: Loaded source document (engine handle), read-only here
        selection: Zero-based page indices, in output order
        mode: COMBINED or SEPARATE
        packaging: NONE or ARCHIVE (only meaningful for SEPARATE)
        output_name: File name of the combined output document
        archive_name: File name of the archive, when packaging is ARCHIVE
    """

    source: Any
    selection: list[int]
    mode: TransformMode = TransformMode.COMBINED
    packaging: Packaging = Packaging.NONE
    output_name: str = DEFAULT_COMBINED_NAME
    archive_name: str = DEFAULT_ARCHIVE_NAME


@dataclass
class OutputDocument:
    """A serialized output document."""

    name: str
    data: bytes
    page_count: int


@dataclass
class OutputBundle:
    """Everything one request produced.

    Attributes:
        documents: Output documents in selection order
        archive: Finalized archive bytes when packaging is ARCHIVE
        archive_name: File name for the archive
    """

    documents: list[OutputDocument] = field(default_factory=list)
    archive: bytes | None = None
    archive_name: str = ""

    @property
    def is_archive(self) -> bool:
        return self.archive is not None

    @property
    def total_pages(self) -> int:
        return sum(doc.page_count for doc in self.documents)


def separate_page_names(selection: list[int], ext: str = PDF_EXTENSION) -> list[str]:
    """Deterministic file names for separate-mode outputs.

    Each page is named ``Page_{n}.{ext}`` after its one-based source number.
    A page selected more than once gets ``_2``, ``_3``... on later copies so
    that every name stays unique.
    """
    seen: dict[int, int] = {}
    names: list[str] = []
    for idx in selection:
        seen[idx] = seen.get(idx, 0) + 1
        name = SEPARATE_PAGE_TEMPLATE.format(page=idx + 1, ext=ext)
        if seen[idx] > 1:
            stem, _, suffix = name.rpartition(".")
            name = f"{stem}_{seen[idx]}.{suffix}"
        names.append(name)
    return names


def _build_document(engine: DocumentEngine, source: Any, indices: list[int]) -> bytes:
    """Create a new document holding copies of *indices*, and serialize it."""
    doc = engine.create_empty()
    try:
        for page in engine.copy_pages(source, indices):
            engine.append_page(doc, page)
        return engine.serialize(doc)
    finally:
        engine.close(doc)


def _check_abort(should_abort: AbortCheck | None, completed: int, total: int) -> None:
    if should_abort is not None and should_abort():
        logger.info("Transformation aborted after %d/%d pages", completed, total)
        raise TransformAbortedError(completed, total)


def transform(
    engine: DocumentEngine,
    request: TransformRequest,
    packer: ArchivePacker | None = None,
    *,
    progress_callback: ProgressCallback | None = None,
    should_abort: AbortCheck | None = None,
) -> OutputBundle:
    """Convert a TransformRequest into an OutputBundle.

    Args:
        engine: Document engine used for every copy and save.
        request: What to build.
        packer: Archive packer for ARCHIVE packaging (default: ZIP).
        progress_callback: Called as ``(current, total, message)`` between steps.
        should_abort: Polled between pages; returning True aborts the request.

    Returns:
        The produced OutputBundle.

    Raises:
        NoValidPagesError: Empty selection.
        InvalidSelectionError: Selection references pages outside the source.
        CopyError, SerializeError: Document engine failures.
        PackagingError: Archive failures.
        TransformAbortedError: should_abort returned True.
    """
    page_count = engine.page_count(request.source)
    selection = list(request.selection)
    validate_selection(selection, page_count)

    def report(current: int, total: int, message: str) -> None:
        if progress_callback is not None:
            progress_callback(current, total, message)

    if request.mode is TransformMode.COMBINED:
        _check_abort(should_abort, 0, 1)
        report(0, 1, f"Copying {len(selection)} pages...")
        data = _build_document(engine, request.source, selection)
        report(1, 1, "Done")
        logger.info("Built combined document %s (%d pages)", request.output_name, len(selection))
        return OutputBundle(
            documents=[OutputDocument(request.output_name, data, len(selection))]
        )

    names = separate_page_names(selection)
    total = len(selection)
    documents: list[OutputDocument] = []

    for i, (idx, name) in enumerate(zip(selection, names, strict=True)):
        _check_abort(should_abort, i, total)
        report(i, total, f"Extracting page {idx + 1}...")
        documents.append(OutputDocument(name, _build_document(engine, request.source, [idx]), 1))

    bundle = OutputBundle(documents=documents)

    if request.packaging is Packaging.ARCHIVE:
        packer = packer or ZipArchivePacker()
        report(total, total, "Packaging archive...")
        archive = packer.create_archive()
        for doc in documents:
            packer.add_entry(archive, doc.name, doc.data)
        bundle.archive = packer.finalize(archive)
        bundle.archive_name = request.archive_name
        logger.info("Packed %d pages into %s", total, request.archive_name)
    else:
        logger.info("Built %d single-page documents", total)

    report(total, total, "Done")
    return bundle
