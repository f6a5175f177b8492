"""
PdfSuite - Services Package

Service modules for page-set transformations and the file-level PDF tools.
"""

from pdfsuite.services.document_engine import DocumentEngine, PikepdfEngine
from pdfsuite.services.archive import ArchivePacker, ZipArchivePacker
from pdfsuite.services.transformer import (
    OutputBundle,
    Packaging,
    TransformMode,
    TransformRequest,
    transform,
)

__all__ = [
    "ArchivePacker",
    "DocumentEngine",
    "OutputBundle",
    "Packaging",
    "PikepdfEngine",
    "TransformMode",
    "TransformRequest",
    "ZipArchivePacker",
    "transform",
]
