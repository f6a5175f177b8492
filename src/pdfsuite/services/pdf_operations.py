"""
PdfSuite - PDF Operations Service

Pure-Python service for the suite's PDF tools.
No UI dependencies - can be used from the CLI or scripts.

Supported operations:
  - Split every page into its own file (optionally zipped)
  - Extract / delete / reorder / reverse pages
  - Merge multiple PDFs
  - Rotate and crop pages
  - Add page numbers and text or logo watermarks
  - Protect (encrypt), unlock (decrypt) and repair
  - Compress (reduce image quality/resolution)
  - Convert images to PDF, merge both sides of an ID card
  - Page count and metadata info
"""

import io
import logging
import os
import shutil
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

import pikepdf
from PIL import Image, ImageOps, UnidentifiedImageError

from pdfsuite.config import ARCHIVE_EXTENSION
from pdfsuite.constants import (
    BYTES_PER_MB,
    CROP_SAFETY_PT,
    DEFAULT_IMAGE_DPI,
    DEFAULT_IMAGE_QUALITY,
    IMAGE_REPLACE_RATIO,
    MIN_IMAGE_DIMENSION_PX,
    POINTS_PER_INCH,
    VALID_ROTATIONS,
)
from pdfsuite.services.document_engine import DocumentEngine, PikepdfEngine
from pdfsuite.services.page_selection import (
    pages_to_keep,
    parse_selection,
    selection_from_indices,
    selection_from_page_numbers,
)
from pdfsuite.services.stamping import (
    NumberStyle,
    WatermarkStyle,
    load_image,
    overlaid,
    render_id_card,
    render_image_watermark,
    render_numbers,
    render_watermark,
)
from pdfsuite.services.transformer import (
    OutputBundle,
    Packaging,
    TransformMode,
    TransformRequest,
    transform,
)
from pdfsuite.utils.exceptions import (
    InvalidSelectionError,
    LoadError,
    NoValidPagesError,
    PackagingError,
    PasswordRequiredError,
    PdfSuiteError,
    TransformAbortedError,
    ValidationError,
)
from pdfsuite.utils.i18n import _
from pdfsuite.utils.progress_state import ProcessingState, ProcessingStatus

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
AbortCheck = Callable[[], bool]


class ErrorCode(Enum):
    """Error classification for PDF operations."""

    NONE = auto()
    FILE_NOT_FOUND = auto()
    PERMISSION_DENIED = auto()
    CORRUPT_PDF = auto()
    PASSWORD_PROTECTED = auto()
    NO_VALID_PAGES = auto()
    INVALID_SELECTION = auto()
    INVALID_INPUT = auto()
    PACKAGING_FAILED = auto()
    CANCELLED = auto()
    DISK_FULL = auto()
    UNKNOWN = auto()


def _classify_error(e: Exception) -> ErrorCode:
    """Classify an exception into an ErrorCode."""
    if isinstance(e, FileNotFoundError):
        return ErrorCode.FILE_NOT_FOUND
    if isinstance(e, PermissionError):
        return ErrorCode.PERMISSION_DENIED
    if isinstance(e, (PasswordRequiredError, pikepdf.PasswordError)):
        return ErrorCode.PASSWORD_PROTECTED
    if isinstance(e, (LoadError, pikepdf.PdfError)):
        return ErrorCode.CORRUPT_PDF
    if isinstance(e, NoValidPagesError):
        return ErrorCode.NO_VALID_PAGES
    if isinstance(e, InvalidSelectionError):
        return ErrorCode.INVALID_SELECTION
    if isinstance(e, (ValidationError, ValueError)):
        return ErrorCode.INVALID_INPUT
    if isinstance(e, PackagingError):
        return ErrorCode.PACKAGING_FAILED
    if isinstance(e, TransformAbortedError):
        return ErrorCode.CANCELLED
    if isinstance(e, OSError) and e.errno == 28:
        return ErrorCode.DISK_FULL
    return ErrorCode.UNKNOWN


def _friendly_error(e: Exception) -> str:
    """Map common exceptions to short user-facing messages."""
    if isinstance(e, FileNotFoundError):
        return _("Could not find the file. Was it moved or deleted?")
    if isinstance(e, PermissionError):
        return _("Cannot write to this folder. Choose a different location.")
    if isinstance(e, (PasswordRequiredError, pikepdf.PasswordError)):
        return _("Invalid password or error decrypting file.")
    if isinstance(e, (LoadError, pikepdf.PdfError)):
        return _("The PDF file appears to be damaged or invalid: {error}").format(error=e)
    if isinstance(e, NoValidPagesError):
        return _("No valid pages specified.")
    if isinstance(e, TransformAbortedError):
        return _("Operation was cancelled.")
    if isinstance(e, PdfSuiteError):
        return _(e.message)
    return str(e)


def _fail(e: Exception) -> "OperationResult":
    """Create a failed OperationResult from an exception."""
    return OperationResult(
        success=False,
        status=ProcessingStatus.ERROR,
        message=_friendly_error(e),
        error_code=_classify_error(e),
    )


# Exceptions every tool turns into a failed OperationResult
_HANDLED = (PdfSuiteError, OSError, pikepdf.PdfError, ValueError)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class PDFInfo:
    """Basic information about a PDF file."""

    path: str
    page_count: int
    file_size_bytes: int
    title: str = ""
    author: str = ""
    creator: str = ""
    encrypted: bool = False
    pdf_version: str = ""

    @property
    def file_size_mb(self) -> float:
        return self.file_size_bytes / BYTES_PER_MB


@dataclass
class OperationResult:
    """Generic result for PDF operations."""

    success: bool
    status: ProcessingStatus = ProcessingStatus.SUCCESS
    message: str = ""
    output_path: str = ""
    output_files: list[str] = field(default_factory=list)
    pages_affected: int = 0
    error_code: ErrorCode = ErrorCode.NONE

    @property
    def state(self) -> ProcessingState:
        """The terminal processing state this result represents."""
        if self.success:
            name = Path(self.output_path).name if self.output_path else ""
            return ProcessingState().processing(100).succeeded(name, self.message)
        return ProcessingState().loading().failed(self.message)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_source(pdf_path: str | Path) -> bytes:
    pdf_path = Path(pdf_path)
    if not pdf_path.is_file():
        raise FileNotFoundError(f"File not found: {pdf_path}")
    return pdf_path.read_bytes()


def _load(engine: DocumentEngine, pdf_path: str | Path, password: str = ""):
    return engine.load(_read_source(pdf_path), password, name=Path(pdf_path).name)


def _prepare_output(output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def _write_bundle(bundle: OutputBundle, output_path: Path, mode: TransformMode) -> list[str]:
    """Write a transformer bundle to disk.

    Archives and combined documents go to *output_path*; separate documents
    without an archive are written into *output_path* as a directory.
    """
    if bundle.is_archive:
        _prepare_output(output_path).write_bytes(bundle.archive)
        return [str(output_path)]

    if mode is TransformMode.COMBINED:
        _prepare_output(output_path).write_bytes(bundle.documents[0].data)
        return [str(output_path)]

    created = not output_path.exists()
    output_path.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    try:
        for doc in bundle.documents:
            target = output_path / doc.name
            written.append(target)
            target.write_bytes(doc.data)
    except OSError:
        # Roll back so a failed write leaves the directory as it was
        if created:
            shutil.rmtree(output_path, ignore_errors=True)
        else:
            for target in written:
                target.unlink(missing_ok=True)
        raise
    return [str(target) for target in written]


def _run_transform(
    pdf_path: str | Path,
    output_path: str | Path,
    build_request: Callable[[object, int], TransformRequest],
    *,
    engine: DocumentEngine | None = None,
    progress_callback: ProgressCallback | None = None,
    should_abort: AbortCheck | None = None,
) -> tuple[OutputBundle, list[str]]:
    """Load *pdf_path*, run the request built for it, and write the result.

    Nothing is written unless the whole transformation succeeded.

    Returns:
        The bundle and the paths written for it.
    """
    engine = engine or PikepdfEngine()
    source = _load(engine, pdf_path)
    try:
        request = build_request(source, engine.page_count(source))
        bundle = transform(
            engine,
            request,
            progress_callback=progress_callback,
            should_abort=should_abort,
        )
    finally:
        engine.close(source)

    return bundle, _write_bundle(bundle, Path(output_path), request.mode)


def _separate_request(
    source, selection: list[int], archive: bool, output_path: str | Path
) -> TransformRequest:
    return TransformRequest(
        source=source,
        selection=selection,
        mode=TransformMode.SEPARATE,
        packaging=Packaging.ARCHIVE if archive else Packaging.NONE,
        archive_name=Path(output_path).name,
    )


def _combined_request(source, selection: list[int], output_path: str | Path) -> TransformRequest:
    return TransformRequest(
        source=source,
        selection=selection,
        mode=TransformMode.COMBINED,
        output_name=Path(output_path).name,
    )


def _success(message: str, output_path: str | Path, files: list[str], pages: int):
    return OperationResult(
        success=True,
        status=ProcessingStatus.SUCCESS,
        message=message,
        output_path=str(output_path),
        output_files=files,
        pages_affected=pages,
    )


# ---------------------------------------------------------------------------
# Info / Inspection
# ---------------------------------------------------------------------------


def get_pdf_info(pdf_path: str | Path, password: str = "") -> PDFInfo:
    """Get basic information about a PDF file.

    Args:
        pdf_path: Path to the PDF file.
        password: Password for encrypted documents.

    Returns:
        PDFInfo with metadata.

    Raises:
        FileNotFoundError: If the file does not exist.
        PasswordRequiredError: If the file is encrypted and *password* is wrong.
        LoadError: If the file is not a valid PDF.
    """
    pdf_path = str(pdf_path)
    if not os.path.isfile(pdf_path):
        raise FileNotFoundError(f"File not found: {pdf_path}")

    file_size = os.path.getsize(pdf_path)
    name = os.path.basename(pdf_path)

    try:
        pdf = pikepdf.open(pdf_path, password=password)
    except pikepdf.PasswordError as e:
        raise PasswordRequiredError(source=name) from e
    except pikepdf.PdfError as e:
        raise LoadError(reason=str(e), source=name) from e

    with pdf:
        info = PDFInfo(
            path=pdf_path,
            page_count=len(pdf.pages),
            file_size_bytes=file_size,
            pdf_version=str(pdf.pdf_version),
            encrypted=pdf.is_encrypted,
        )

        with pdf.open_metadata(set_pikepdf_as_editor=False) as meta:
            info.title = str(meta.get("dc:title", ""))
            info.author = str(meta.get("dc:creator", ""))

        if "/Creator" in pdf.docinfo:
            info.creator = str(pdf.docinfo["/Creator"])

    return info


# ---------------------------------------------------------------------------
# Page-set tools (split / extract / delete / reorder)
# ---------------------------------------------------------------------------


def split_pages(
    pdf_path: str | Path,
    output_path: str | Path,
    *,
    pages: str | None = None,
    archive: bool = True,
    engine: DocumentEngine | None = None,
    progress_callback: ProgressCallback | None = None,
    should_abort: AbortCheck | None = None,
) -> OperationResult:
    """Split a PDF into one single-page file per page.

    Args:
        pdf_path: Path to the source PDF.
        output_path: ZIP file to create when *archive* is True, otherwise a
                     directory that receives ``Page_{n}.pdf`` files.
        pages: Optional range expression restricting the pages (default: all).
        archive: Bundle the pages into one ZIP file.

    Returns:
        OperationResult listing the created files.
    """
    if archive and Path(output_path).suffix.lower() != f".{ARCHIVE_EXTENSION}":
        output_path = Path(output_path).with_suffix(f".{ARCHIVE_EXTENSION}")

    def build(source, page_count: int) -> TransformRequest:
        if pages:
            selection = parse_selection(pages, page_count)
        else:
            selection = list(range(page_count))
            if not selection:
                raise NoValidPagesError(page_count=page_count)
        return _separate_request(source, selection, archive, output_path)

    try:
        bundle, files = _run_transform(
            pdf_path,
            output_path,
            build,
            engine=engine,
            progress_callback=progress_callback,
            should_abort=should_abort,
        )
    except _HANDLED as e:
        logger.error("Split failed: %s", e)
        return _fail(e)

    logger.info("Split %d pages → %s", len(bundle.documents), output_path)
    return _success(
        f"Split into {len(bundle.documents)} files",
        output_path,
        files,
        len(bundle.documents),
    )


def extract_pages(
    pdf_path: str | Path,
    output_path: str | Path,
    pages: str,
    *,
    separate: bool = False,
    archive: bool = True,
    engine: DocumentEngine | None = None,
    progress_callback: ProgressCallback | None = None,
    should_abort: AbortCheck | None = None,
) -> OperationResult:
    """Extract pages named by a range expression into a new PDF.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path (or ZIP / directory when *separate*).
        pages: Range expression such as "1, 3, 5-8". Order and duplicates
               are preserved in the output.
        separate: Write one file per selected page instead of one document.
        archive: With *separate*, bundle the files into one ZIP.

    Returns:
        OperationResult.
    """

    def build(source, page_count: int) -> TransformRequest:
        selection = parse_selection(pages, page_count)
        if separate:
            return _separate_request(source, selection, archive, output_path)
        return _combined_request(source, selection, output_path)

    try:
        bundle, files = _run_transform(
            pdf_path,
            output_path,
            build,
            engine=engine,
            progress_callback=progress_callback,
            should_abort=should_abort,
        )
    except _HANDLED as e:
        logger.error("Extract failed: %s", e)
        return _fail(e)

    count = bundle.total_pages
    logger.info("Extracted %d pages → %s", count, output_path)
    return _success(f"Extracted {count} pages", output_path, files, count)


def delete_pages(
    pdf_path: str | Path,
    output_path: str | Path,
    pages: str,
    *,
    engine: DocumentEngine | None = None,
) -> OperationResult:
    """Remove the pages named by a range expression.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path.
        pages: Range expression of pages to delete.

    Returns:
        OperationResult; fails when every page would be removed.
    """
    deleted_count = 0

    def build(source, page_count: int) -> TransformRequest:
        nonlocal deleted_count
        kept = pages_to_keep(parse_selection(pages, page_count), page_count)
        deleted_count = page_count - len(kept)
        return _combined_request(source, kept, output_path)

    try:
        bundle, files = _run_transform(pdf_path, output_path, build, engine=engine)
    except _HANDLED as e:
        logger.error("Delete pages failed: %s", e)
        return _fail(e)

    kept = bundle.total_pages
    logger.info("Deleted %d pages, kept %d pages → %s", deleted_count, kept, output_path)
    return _success(
        f"Deleted {deleted_count} pages, {kept} remaining",
        output_path,
        files,
        deleted_count,
    )


def reorder_pages(
    pdf_path: str | Path,
    output_path: str | Path,
    new_order: list[int],
    *,
    engine: DocumentEngine | None = None,
) -> OperationResult:
    """Reorder pages in a PDF.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path.
        new_order: List of 1-indexed page numbers in the desired order.
                   Can include duplicates and omit pages.

    Returns:
        OperationResult.
    """

    def build(source, page_count: int) -> TransformRequest:
        selection = selection_from_page_numbers(new_order, page_count)
        return _combined_request(source, selection, output_path)

    try:
        bundle, files = _run_transform(pdf_path, output_path, build, engine=engine)
    except _HANDLED as e:
        logger.error("Reorder failed: %s", e)
        return _fail(e)

    count = bundle.total_pages
    logger.info("Reordered %d pages → %s", count, output_path)
    return _success(f"Reordered {count} pages", output_path, files, count)


def reverse_pages(
    pdf_path: str | Path,
    output_path: str | Path,
) -> OperationResult:
    """Reverse the page order of a PDF."""
    try:
        with pikepdf.open(pdf_path) as src:
            total = len(src.pages)
    except (OSError, pikepdf.PdfError, ValueError) as e:
        logger.error("Reverse failed: %s", e)
        return _fail(e)
    return reorder_pages(pdf_path, output_path, list(range(total, 0, -1)))


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def merge_pdfs(
    input_paths: list[str | Path],
    output_path: str | Path,
    *,
    engine: DocumentEngine | None = None,
    progress_callback: ProgressCallback | None = None,
) -> OperationResult:
    """Merge multiple PDF files into one, in the given order.

    Args:
        input_paths: At least two PDF file paths.
        output_path: Path for the merged output PDF.

    Returns:
        OperationResult.
    """
    if len(input_paths) < 2:
        return OperationResult(
            success=False,
            status=ProcessingStatus.ERROR,
            message=_("Select at least two PDF files to merge."),
            error_code=ErrorCode.INVALID_INPUT,
        )

    engine = engine or PikepdfEngine()
    dst = engine.create_empty()
    open_sources = []
    total_pages = 0
    total_files = len(input_paths)

    try:
        for i, path in enumerate(input_paths):
            path = Path(path)
            if progress_callback is not None:
                progress_callback(i, total_files, f"Merging {path.name}...")

            src = _load(engine, path)
            open_sources.append(src)
            count = engine.page_count(src)
            for page in engine.copy_pages(src, list(range(count))):
                engine.append_page(dst, page)
            total_pages += count
            logger.info("Merged %d pages from %s", count, path.name)

        data = engine.serialize(dst)
        _prepare_output(output_path).write_bytes(data)
        if progress_callback is not None:
            progress_callback(total_files, total_files, "Done")
        logger.info("Merged PDF saved: %s (%d pages)", output_path, total_pages)

        return _success(
            f"Merged {total_files} files → {total_pages} pages",
            output_path,
            [str(output_path)],
            total_pages,
        )
    except _HANDLED as e:
        logger.error("Merge failed: %s", e)
        return _fail(e)
    finally:
        for src in open_sources:
            engine.close(src)
        engine.close(dst)


# ---------------------------------------------------------------------------
# Rotate / crop
# ---------------------------------------------------------------------------


def rotate_pages(
    pdf_path: str | Path,
    output_path: str | Path,
    angle: int,
    pages: list[int] | None = None,
) -> OperationResult:
    """Rotate pages in a PDF.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path.
        angle: Rotation angle in degrees (90, 180, 270 / -90).
        pages: Optional 1-indexed page numbers to rotate (default: all).
               Treated as a set; each page is rotated at most once.

    Returns:
        OperationResult.
    """
    output_path = Path(output_path)

    angle = angle % 360
    if angle not in VALID_ROTATIONS:
        return _fail(ValidationError("angle", str(angle), "must be a multiple of 90"))

    try:
        with pikepdf.open(pdf_path) as pdf:
            total = len(pdf.pages)
            if pages is None:
                targets = list(range(total))
            else:
                targets = selection_from_indices([p - 1 for p in pages], total)

            for idx in targets:
                page = pdf.pages[idx]
                current = int(page.get("/Rotate", 0))
                page.Rotate = (current + angle) % 360
            rotated = len(targets)

            pdf.save(str(_prepare_output(output_path)))

            logger.info("Rotated %d pages by %d° → %s", rotated, angle, output_path)
            return _success(
                f"Rotated {rotated} pages by {angle}°", output_path, [str(output_path)], rotated
            )
    except _HANDLED as e:
        logger.error("Rotate failed: %s", e)
        return _fail(e)


def crop_margins(
    pdf_path: str | Path,
    output_path: str | Path,
    margin: float,
) -> OperationResult:
    """Crop every page by *margin* points on each side.

    The margin is clamped per page so that at least a small visible area
    remains on very small pages.
    """
    output_path = Path(output_path)

    if margin < 0:
        return _fail(ValidationError("margin", str(margin), "must not be negative"))

    try:
        with pikepdf.open(pdf_path) as pdf:
            for page in pdf.pages:
                llx, lly, urx, ury = (float(v) for v in page.mediabox)
                width, height = urx - llx, ury - lly
                safe = min(margin, width / 2 - CROP_SAFETY_PT, height / 2 - CROP_SAFETY_PT)
                safe = max(0.0, safe)
                page.CropBox = pikepdf.Array([llx + safe, lly + safe, urx - safe, ury - safe])

            pdf.save(str(_prepare_output(output_path)))
            count = len(pdf.pages)

        logger.info("Cropped %d pages by %.1f pt → %s", count, margin, output_path)
        return _success(f"Cropped {count} pages", output_path, [str(output_path)], count)
    except _HANDLED as e:
        logger.error("Crop failed: %s", e)
        return _fail(e)


# ---------------------------------------------------------------------------
# Stamping
# ---------------------------------------------------------------------------


def add_page_numbers(
    pdf_path: str | Path,
    output_path: str | Path,
    style: NumberStyle | None = None,
) -> OperationResult:
    """Add page numbers to every page."""
    output_path = Path(output_path)
    style = style or NumberStyle()

    try:
        with pikepdf.open(pdf_path) as pdf:
            with overlaid(pdf, render_numbers(pdf, style)) as count:
                pdf.save(str(_prepare_output(output_path)))
        logger.info("Numbered %d pages (%s) → %s", count, style.position, output_path)
        return _success(f"Numbered {count} pages", output_path, [str(output_path)], count)
    except _HANDLED as e:
        logger.error("Numbering failed: %s", e)
        return _fail(e)


def add_watermark(
    pdf_path: str | Path,
    output_path: str | Path,
    text: str = "",
    style: WatermarkStyle | None = None,
    *,
    image: str | Path | None = None,
) -> OperationResult:
    """Stamp a text or logo watermark on every page.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path.
        text: Watermark text; must be empty when *image* is given.
        style: Placement, opacity, rotation and scale (colour applies to text only).
        image: Optional PNG or JPEG logo stamped instead of text.
    """
    output_path = Path(output_path)
    style = style or WatermarkStyle()

    try:
        if image is not None and text.strip():
            raise ValidationError("image", str(image), "use either watermark text or an image")
        logo = load_image(image) if image is not None else None

        with pikepdf.open(pdf_path) as pdf:
            if logo is not None:
                overlay = render_image_watermark(pdf, logo, style)
            else:
                overlay = render_watermark(pdf, text, style)
            with overlaid(pdf, overlay) as count:
                pdf.save(str(_prepare_output(output_path)))
        logger.info("Watermarked %d pages → %s", count, output_path)
        return _success(f"Watermarked {count} pages", output_path, [str(output_path)], count)
    except _HANDLED as e:
        logger.error("Watermark failed: %s", e)
        return _fail(e)


# ---------------------------------------------------------------------------
# Security / repair
# ---------------------------------------------------------------------------


def protect_pdf(
    pdf_path: str | Path,
    output_path: str | Path,
    password: str,
    owner_password: str | None = None,
) -> OperationResult:
    """Encrypt a PDF with AES-256.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path.
        password: Password required to open the document.
        owner_password: Password for changing permissions (default: *password*).
    """
    if not password:
        return _fail(ValidationError("password", reason="password must not be empty"))

    output_path = Path(output_path)
    encryption = pikepdf.Encryption(owner=owner_password or password, user=password, R=6)

    try:
        with pikepdf.open(pdf_path) as pdf:
            count = len(pdf.pages)
            pdf.save(str(_prepare_output(output_path)), encryption=encryption)
        logger.info("Encrypted %s → %s", Path(pdf_path).name, output_path)
        return _success(_("Document protected"), output_path, [str(output_path)], count)
    except _HANDLED as e:
        logger.error("Protect failed: %s", e)
        return _fail(e)


def unlock_pdf(
    pdf_path: str | Path,
    output_path: str | Path,
    password: str,
) -> OperationResult:
    """Open an encrypted PDF with *password* and save it without encryption."""
    output_path = Path(output_path)

    try:
        with pikepdf.open(pdf_path, password=password) as pdf:
            was_encrypted = pdf.is_encrypted
            count = len(pdf.pages)
            pdf.save(str(_prepare_output(output_path)), encryption=False)
        if not was_encrypted:
            logger.warning("%s was not encrypted", Path(pdf_path).name)
        logger.info("Decrypted %s → %s", Path(pdf_path).name, output_path)
        return _success(_("Document unlocked"), output_path, [str(output_path)], count)
    except _HANDLED as e:
        logger.error("Unlock failed: %s", e)
        return _fail(e)


def repair_pdf(
    pdf_path: str | Path,
    output_path: str | Path,
) -> OperationResult:
    """Re-save a PDF, letting qpdf reconstruct damaged cross-reference data."""
    output_path = Path(output_path)

    try:
        with pikepdf.open(pdf_path) as pdf:
            count = len(pdf.pages)
            pdf.save(
                str(_prepare_output(output_path)),
                fix_metadata_version=True,
                object_stream_mode=pikepdf.ObjectStreamMode.generate,
            )
        logger.info("Repaired %s → %s (%d pages)", Path(pdf_path).name, output_path, count)
        return _success(_("Document repaired"), output_path, [str(output_path)], count)
    except _HANDLED as e:
        logger.error("Repair failed: %s", e)
        if isinstance(e, pikepdf.PdfError) and not isinstance(e, pikepdf.PasswordError):
            return _fail(LoadError(reason="too severely corrupted to be repaired"))
        return _fail(e)


# ---------------------------------------------------------------------------
# Compress
# ---------------------------------------------------------------------------


def compress_pdf(
    pdf_path: str | Path,
    output_path: str | Path,
    *,
    image_quality: int = DEFAULT_IMAGE_QUALITY,
    image_dpi: int = DEFAULT_IMAGE_DPI,
    progress_callback: ProgressCallback | None = None,
) -> OperationResult:
    """Compress a PDF by reducing image quality and applying stream compression.

    Uses PIL to re-encode images at lower quality/resolution, and pikepdf's
    stream compression for all other streams.

    Args:
        pdf_path: Source PDF path.
        output_path: Output PDF path.
        image_quality: JPEG quality for image re-encoding (1-95, default 60).
        image_dpi: Target DPI for images (default 150).

    Returns:
        OperationResult.
    """
    if not 1 <= image_quality <= 95:
        return _fail(ValidationError("image_quality", str(image_quality), "must be 1-95"))

    output_path = Path(output_path)

    try:
        original_size = os.path.getsize(pdf_path)

        with pikepdf.open(pdf_path) as pdf:
            images_compressed = 0
            seen: set[tuple[int, int]] = set()
            total = len(pdf.pages)

            for i, page in enumerate(pdf.pages):
                if progress_callback is not None:
                    progress_callback(i, total, f"Compressing page {i + 1} of {total}...")
                for name, stream in _page_images(page, seen):
                    try:
                        if _reencode_image(stream, page, image_quality, image_dpi):
                            images_compressed += 1
                    except (pikepdf.PdfError, OSError, ValueError) as e:
                        logger.debug("Skipping image %s: %s", name, e)

            pdf.remove_unreferenced_resources()
            pdf.save(
                str(_prepare_output(output_path)),
                compress_streams=True,
                object_stream_mode=pikepdf.ObjectStreamMode.generate,
            )

        new_size = os.path.getsize(str(output_path))
        ratio = (1 - new_size / original_size) * 100 if original_size > 0 else 0

        logger.info(
            "Compressed: %.2f MB → %.2f MB (%.1f%% reduction, %d images re-encoded)",
            original_size / BYTES_PER_MB,
            new_size / BYTES_PER_MB,
            ratio,
            images_compressed,
        )
        return _success(
            (
                f"Original: {original_size / BYTES_PER_MB:.2f}MB -> "
                f"New: {new_size / BYTES_PER_MB:.2f}MB ({ratio:.1f}% reduction)"
            ),
            output_path,
            [str(output_path)],
            images_compressed,
        )
    except _HANDLED as e:
        logger.error("Compress failed: %s", e)
        return _fail(e)


def _current_dpi(page: pikepdf.Page, width: int, height: int) -> float:
    """Effective DPI of a width x height image drawn over the full page."""
    try:
        mbox = page.mediabox
        page_width_pt = float(mbox[2]) - float(mbox[0])
        page_height_pt = float(mbox[3]) - float(mbox[1])
        if page_width_pt > 0 and page_height_pt > 0:
            return max(
                width / (page_width_pt / POINTS_PER_INCH),
                height / (page_height_pt / POINTS_PER_INCH),
            )
    except (AttributeError, TypeError, ValueError, ZeroDivisionError):
        pass
    return 300.0


def _page_images(
    page: pikepdf.Page, seen: set[tuple[int, int]]
) -> Iterator[tuple[str, pikepdf.Stream]]:
    """Yield (name, stream) for the image XObjects of *page* worth re-encoding.

    Images already visited through another page and images smaller than
    MIN_IMAGE_DIMENSION_PX are skipped. Masked images are left alone since
    JPEG has no alpha channel.
    """
    resources = page.obj.get("/Resources")
    xobjects = resources.get("/XObject") if resources is not None else None
    if xobjects is None:
        return

    for name in list(xobjects.keys()):
        stream = xobjects[name]
        if not isinstance(stream, pikepdf.Stream) or stream.get("/Subtype") != pikepdf.Name.Image:
            continue
        if stream.objgen in seen:
            continue
        seen.add(stream.objgen)

        if "/SMask" in stream or "/Mask" in stream:
            logger.debug("Keeping masked image %s", name)
            continue
        width, height = int(stream.get("/Width", 0)), int(stream.get("/Height", 0))
        if min(width, height) < MIN_IMAGE_DIMENSION_PX:
            continue
        yield name, stream


def _reencode_image(
    stream: pikepdf.Stream, page: pikepdf.Page, quality: int, target_dpi: int
) -> bool:
    """Rewrite *stream* in place as a smaller JPEG.

    The image is downsampled first when it is drawn at more than 1.2x
    *target_dpi*. The stream keeps its object number, so every page that
    shares it sees the new data.

    Returns:
        True if the JPEG was small enough to replace the original data.
    """
    try:
        img = pikepdf.PdfImage(stream).as_pil_image()
    except (pikepdf.PdfError, OSError, ValueError, NotImplementedError) as e:
        logger.debug("Cannot decode image %s: %s", stream.objgen, e)
        return False

    width, height = img.size
    dpi = _current_dpi(page, width, height)
    if dpi > target_dpi * 1.2:
        ratio = target_dpi / dpi
        img = img.resize(
            (
                max(MIN_IMAGE_DIMENSION_PX, int(width * ratio)),
                max(MIN_IMAGE_DIMENSION_PX, int(height * ratio)),
            ),
            Image.LANCZOS,
        )
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality, optimize=True)
    if buf.tell() >= len(stream.read_raw_bytes()) * IMAGE_REPLACE_RATIO:
        return False

    stream.write(buf.getvalue(), filter=pikepdf.Name.DCTDecode)
    for key in ("/DecodeParms", "/Decode"):
        if key in stream:
            del stream[key]
    stream["/Width"] = img.width
    stream["/Height"] = img.height
    gray = img.mode == "L"
    stream["/ColorSpace"] = pikepdf.Name.DeviceGray if gray else pikepdf.Name.DeviceRGB
    stream["/BitsPerComponent"] = 8
    return True


# ---------------------------------------------------------------------------
# Images to PDF
# ---------------------------------------------------------------------------


def _image_page_pdf(image_path: Path) -> bytes:
    """Render one image file as a single-page PDF."""
    with Image.open(image_path) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGB":
            img = img.convert("RGB")
        buf = io.BytesIO()
        img.save(buf, format="PDF")
    return buf.getvalue()


def images_to_pdf(
    image_paths: list[str | Path],
    output_path: str | Path,
    *,
    engine: DocumentEngine | None = None,
    progress_callback: ProgressCallback | None = None,
) -> OperationResult:
    """Convert image files into a PDF, one page per image in the given order."""
    if not image_paths:
        return OperationResult(
            success=False,
            status=ProcessingStatus.ERROR,
            message=_("No input files provided."),
            error_code=ErrorCode.INVALID_INPUT,
        )

    engine = engine or PikepdfEngine()
    dst = engine.create_empty()
    pages_pdfs = []
    total = len(image_paths)

    try:
        for i, path in enumerate(image_paths):
            path = Path(path)
            if progress_callback is not None:
                progress_callback(i, total, f"Adding image {i + 1}...")
            if not path.is_file():
                raise FileNotFoundError(f"File not found: {path}")
            try:
                data = _image_page_pdf(path)
            except UnidentifiedImageError as e:
                raise ValidationError("image", str(path), "not a supported image") from e

            single = engine.load(data, name=path.name)
            pages_pdfs.append(single)
            for page in engine.copy_pages(single, [0]):
                engine.append_page(dst, page)

        _prepare_output(output_path).write_bytes(engine.serialize(dst))
        if progress_callback is not None:
            progress_callback(total, total, "Done")
        logger.info("Converted %d images → %s", total, output_path)
        return _success(f"Converted {total} images", output_path, [str(output_path)], total)
    except _HANDLED as e:
        logger.error("Images to PDF failed: %s", e)
        return _fail(e)
    finally:
        for single in pages_pdfs:
            engine.close(single)
        engine.close(dst)


# ---------------------------------------------------------------------------
# ID card
# ---------------------------------------------------------------------------


def id_card_merge(
    front_path: str | Path,
    back_path: str | Path,
    output_path: str | Path,
) -> OperationResult:
    """Place the front and back photos of an ID card on a single A4 page.

    Both sides are stretched to card proportions (1.58:1) across the page
    width inside 20mm margins, front above back with a 10mm gap.

    Args:
        front_path: Image of the front side.
        back_path: Image of the back side.
        output_path: Output PDF path.
    """
    output_path = Path(output_path)

    try:
        front = load_image(front_path)
        back = load_image(back_path)
        data = render_id_card(front, back)
        _prepare_output(output_path).write_bytes(data)
        logger.info("ID card sheet saved: %s", output_path)
        return _success(_("ID card merged"), output_path, [str(output_path)], 1)
    except _HANDLED as e:
        logger.error("ID card merge failed: %s", e)
        return _fail(e)
