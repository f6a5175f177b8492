"""
PdfSuite - Document Engine

Capability interface over a paged-document library, and its pikepdf
implementation. The transformer only talks to this interface so it can be
driven by a fake engine in tests.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import pikepdf

from pdfsuite.utils.exceptions import CopyError, LoadError, PasswordRequiredError, SerializeError

logger = logging.getLogger(__name__)


class DocumentEngine(ABC):
    """
    Load/copy/append/serialize operations over paged documents.

    Engines must:
    - Never mutate the source document while copying from it
    - Return copied pages in the same order as the requested indices
    - Raise LoadError, CopyError or SerializeError, never library exceptions
    """

    @abstractmethod
    def load(self, data: bytes, password: str = "", *, name: str | None = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def page_count(self, doc: Any) -> int:
        raise NotImplementedError

    @abstractmethod
    def create_empty(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def copy_pages(self, source: Any, indices: Sequence[int]) -> list[Any]:
        """Return page handles for *indices* (zero-based, explicit ordering)."""
        raise NotImplementedError

    @abstractmethod
    def append_page(self, doc: Any, page: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def serialize(self, doc: Any) -> bytes:
        raise NotImplementedError

    def close(self, doc: Any) -> None:
        """Release resources held by *doc*. Default is a no-op."""
        return None


class PikepdfEngine(DocumentEngine):
    """Document engine backed by pikepdf (qpdf).

    Args:
        compress_streams: Compress uncompressed streams when saving.
        object_stream_mode: pikepdf object stream mode used when saving.
        encryption: Optional encryption applied to every serialized document.
    """

    def __init__(
        self,
        *,
        compress_streams: bool = True,
        object_stream_mode: pikepdf.ObjectStreamMode = pikepdf.ObjectStreamMode.preserve,
        encryption: pikepdf.Encryption | None = None,
    ) -> None:
        self.compress_streams = compress_streams
        self.object_stream_mode = object_stream_mode
        self.encryption = encryption

    def load(self, data: bytes, password: str = "", *, name: str | None = None) -> pikepdf.Pdf:
        try:
            return pikepdf.open(io.BytesIO(data), password=password)
        except pikepdf.PasswordError as e:
            raise PasswordRequiredError(source=name) from e
        except (pikepdf.PdfError, ValueError) as e:
            raise LoadError(reason=str(e), source=name) from e

    def page_count(self, doc: pikepdf.Pdf) -> int:
        return len(doc.pages)

    def create_empty(self) -> pikepdf.Pdf:
        return pikepdf.Pdf.new()

    def copy_pages(self, source: pikepdf.Pdf, indices: Sequence[int]) -> list[pikepdf.Page]:
        # pikepdf copies foreign pages into the destination on append, so
        # "copying" here only resolves the handles; the source is untouched.
        total = len(source.pages)
        bad = [i for i in indices if not 0 <= i < total]
        if bad:
            raise CopyError(reason=f"document has {total} pages", indices=bad)
        try:
            return [source.pages[i] for i in indices]
        except (pikepdf.PdfError, IndexError) as e:
            raise CopyError(reason=str(e), indices=list(indices)) from e

    def append_page(self, doc: pikepdf.Pdf, page: pikepdf.Page) -> None:
        try:
            doc.pages.append(page)
        except (pikepdf.PdfError, TypeError, ValueError) as e:
            raise CopyError(reason=str(e)) from e

    def serialize(self, doc: pikepdf.Pdf) -> bytes:
        buf = io.BytesIO()
        options: dict[str, Any] = {
            "compress_streams": self.compress_streams,
            "object_stream_mode": self.object_stream_mode,
        }
        if self.encryption is not None:
            options["encryption"] = self.encryption
        try:
            doc.save(buf, **options)
        except (pikepdf.PdfError, OSError, ValueError) as e:
            raise SerializeError(reason=str(e)) from e
        return buf.getvalue()

    def close(self, doc: pikepdf.Pdf) -> None:
        try:
            doc.close()
        except pikepdf.PdfError as e:
            logger.debug("Ignoring error while closing document: %s", e)
