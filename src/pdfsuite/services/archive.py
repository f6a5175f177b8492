"""
PdfSuite - Archive Packer

Bundles the documents produced in separate mode into a single ZIP file.
"""

from __future__ import annotations

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from typing import Any

from pdfsuite.utils.exceptions import PackagingError

logger = logging.getLogger(__name__)


class ArchivePacker(ABC):
    """Create an archive, add named entries in order, finalize to bytes."""

    @abstractmethod
    def create_archive(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def add_entry(self, archive: Any, filename: str, data: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def finalize(self, archive: Any) -> bytes:
        raise NotImplementedError


class _ZipArchive:
    """In-memory ZIP being assembled."""

    def __init__(self, compression: int, compresslevel: int | None) -> None:
        self.buffer = io.BytesIO()
        self.zip = zipfile.ZipFile(
            self.buffer, "w", compression=compression, compresslevel=compresslevel
        )
        self.names: list[str] = []


class ZipArchivePacker(ArchivePacker):
    """ZIP implementation of the archive packer (DEFLATE by default)."""

    def __init__(
        self,
        compression: int = zipfile.ZIP_DEFLATED,
        compresslevel: int | None = None,
    ) -> None:
        self.compression = compression
        self.compresslevel = compresslevel

    def create_archive(self) -> _ZipArchive:
        return _ZipArchive(self.compression, self.compresslevel)

    def add_entry(self, archive: _ZipArchive, filename: str, data: bytes) -> None:
        if filename in archive.names:
            raise PackagingError(reason="duplicate entry name", entry=filename)
        try:
            archive.zip.writestr(filename, data)
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            raise PackagingError(reason=str(e), entry=filename) from e
        archive.names.append(filename)

    def finalize(self, archive: _ZipArchive) -> bytes:
        try:
            archive.zip.close()
        except (OSError, ValueError) as e:
            raise PackagingError(reason=str(e)) from e
        data = archive.buffer.getvalue()
        logger.debug("Finalized archive: %d entries, %d bytes", len(archive.names), len(data))
        return data
