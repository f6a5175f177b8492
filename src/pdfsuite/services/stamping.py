"""
PdfSuite - Stamping

Draws page numbers and text or logo watermarks with reportlab and lays them
over existing pages with pikepdf. Also lays out the two sides of an ID card
on a single A4 sheet.
"""

import io
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import pikepdf
from PIL import Image, ImageOps, UnidentifiedImageError
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from pdfsuite.constants import (
    DEFAULT_NUMBER_FONT_SIZE,
    DEFAULT_STAMP_COLOR,
    DEFAULT_WATERMARK_OPACITY,
    DEFAULT_WATERMARK_ROTATION,
    ID_CARD_ASPECT_RATIO,
    ID_CARD_GAP_MM,
    ID_CARD_MARGIN_MM,
    NUMBER_BOTTOM_MARGIN_PT,
    NUMBER_SIDE_MARGIN_PT,
    NUMBER_TOP_MARGIN_PT,
    WATERMARK_BASE_FONT_SIZE,
    WATERMARK_IMAGE_BASE_SCALE,
    WATERMARK_MARGIN_PT,
)
from pdfsuite.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

NUMBER_POSITIONS = ("tl", "tc", "tr", "bl", "bc", "br")
WATERMARK_ALIGNMENTS = ("TL", "TC", "TR", "ML", "MC", "MR", "BL", "BC", "BR")

NUMBER_FONT = "Helvetica"
WATERMARK_FONT = "Helvetica-Bold"


@dataclass
class NumberStyle:
    """Appearance of page numbers."""

    position: str = "bc"
    font_size: float = DEFAULT_NUMBER_FONT_SIZE
    color: str = DEFAULT_STAMP_COLOR
    start_at: int = 1

    def __post_init__(self) -> None:
        self.position = self.position.lower()
        if self.position not in NUMBER_POSITIONS:
            raise ValidationError("position", self.position, f"use one of {NUMBER_POSITIONS}")
        if self.font_size <= 0:
            raise ValidationError("font_size", str(self.font_size), "must be positive")
        parse_color(self.color)


@dataclass
class WatermarkStyle:
    """Appearance of a text watermark."""

    opacity: float = DEFAULT_WATERMARK_OPACITY
    rotation: float = DEFAULT_WATERMARK_ROTATION
    scale: float = 1.0
    color: str = DEFAULT_STAMP_COLOR
    alignment: str = "MC"

    def __post_init__(self) -> None:
        self.alignment = self.alignment.upper()
        if self.alignment not in WATERMARK_ALIGNMENTS:
            raise ValidationError(
                "alignment", self.alignment, f"use one of {WATERMARK_ALIGNMENTS}"
            )
        if not 0.0 <= self.opacity <= 1.0:
            raise ValidationError("opacity", str(self.opacity), "must be between 0 and 1")
        if self.scale <= 0:
            raise ValidationError("scale", str(self.scale), "must be positive")
        parse_color(self.color)

    @property
    def font_size(self) -> float:
        return WATERMARK_BASE_FONT_SIZE * self.scale


def parse_color(value: str) -> HexColor:
    """Parse a ``#rrggbb`` colour string."""
    text = value.strip()
    if len(text) != 7 or not text.startswith("#"):
        raise ValidationError("color", value, "expected #rrggbb")
    try:
        int(text[1:], 16)
    except ValueError:
        raise ValidationError("color", value, "expected #rrggbb") from None
    return HexColor(text)


def number_origin(
    position: str, width: float, height: float, text_width: float
) -> tuple[float, float]:
    """Lower-left origin of a page number label on a width x height page."""
    x = width / 2 - text_width / 2
    y = NUMBER_BOTTOM_MARGIN_PT

    if position[0] == "t":
        y = height - NUMBER_TOP_MARGIN_PT
    if position[1] == "l":
        x = NUMBER_SIDE_MARGIN_PT
    elif position[1] == "r":
        x = width - text_width - NUMBER_SIDE_MARGIN_PT
    return x, y


def watermark_origin(
    alignment: str, width: float, height: float, mark_width: float, mark_height: float
) -> tuple[float, float]:
    """Lower-left origin of a watermark of the given size on a page."""
    x = width / 2 - mark_width / 2
    y = height / 2 - mark_height / 2

    if alignment[0] == "T":
        y = height - mark_height - WATERMARK_MARGIN_PT
    elif alignment[0] == "B":
        y = WATERMARK_MARGIN_PT
    if alignment[1] == "L":
        x = WATERMARK_MARGIN_PT
    elif alignment[1] == "R":
        x = width - mark_width - WATERMARK_MARGIN_PT
    return x, y


def _page_box(page: pikepdf.Page) -> tuple[float, float, float, float]:
    box = page.mediabox
    return float(box[0]), float(box[1]), float(box[2]), float(box[3])


@contextmanager
def overlaid(pdf: pikepdf.Pdf, overlay_bytes: bytes) -> Iterator[int]:
    """Overlay page i of *overlay_bytes* onto page i of *pdf*.

    The overlay document stays open for the duration of the block; *pdf*
    must be saved inside it since copied stream data is read at save time.

    Yields:
        Number of pages stamped.
    """
    if not overlay_bytes:
        yield 0
        return
    with pikepdf.open(io.BytesIO(overlay_bytes)) as overlay:
        for page, stamp in zip(pdf.pages, overlay.pages, strict=True):
            llx, lly, urx, ury = _page_box(page)
            page.add_overlay(stamp, pikepdf.Rectangle(llx, lly, urx, ury))
        yield len(pdf.pages)


def render_numbers(pdf: pikepdf.Pdf, style: NumberStyle) -> bytes:
    """Draw one page-number overlay page per page of *pdf*.

    Returns:
        The overlay PDF, or empty bytes when *pdf* has no pages.
    """
    if not pdf.pages:
        return b""

    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    color = parse_color(style.color)

    for i, page in enumerate(pdf.pages):
        llx, lly, urx, ury = _page_box(page)
        width, height = urx - llx, ury - lly
        c.setPageSize((width, height))

        text = str(i + style.start_at)
        text_width = pdfmetrics.stringWidth(text, NUMBER_FONT, style.font_size)
        x, y = number_origin(style.position, width, height, text_width)

        c.setFont(NUMBER_FONT, style.font_size)
        c.setFillColor(color)
        c.drawString(x, y, text)
        c.showPage()

    c.save()
    logger.debug("Rendered %d page numbers (%s)", len(pdf.pages), style.position)
    return buf.getvalue()


def render_watermark(pdf: pikepdf.Pdf, text: str, style: WatermarkStyle) -> bytes:
    """Draw one watermark overlay page per page of *pdf*.

    Returns:
        The overlay PDF, or empty bytes when *pdf* has no pages.

    Raises:
        ValidationError: If *text* is blank.
    """
    if not text.strip():
        raise ValidationError("text", text, "watermark text is empty")
    if not pdf.pages:
        return b""

    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    color = parse_color(style.color)
    size = style.font_size
    mark_width = pdfmetrics.stringWidth(text, WATERMARK_FONT, size)

    for page in pdf.pages:
        llx, lly, urx, ury = _page_box(page)
        width, height = urx - llx, ury - lly
        c.setPageSize((width, height))

        x, y = watermark_origin(style.alignment, width, height, mark_width, size)

        c.saveState()
        c.setFillColor(color)
        c.setFillAlpha(style.opacity)
        c.setFont(WATERMARK_FONT, size)
        c.translate(x, y)
        c.rotate(style.rotation)
        c.drawString(0, 0, text)
        c.restoreState()
        c.showPage()

    c.save()
    logger.debug("Rendered watermark %r on %d pages", text, len(pdf.pages))
    return buf.getvalue()


def load_image(path: str | Path) -> Image.Image:
    """Open an image file upright, as RGB or RGBA when it has transparency.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValidationError: If Pillow cannot read the file as an image.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            has_alpha = "A" in img.getbands() or "transparency" in img.info
            return img.convert("RGBA" if has_alpha else "RGB")
    except UnidentifiedImageError as e:
        raise ValidationError("image", str(path), "not a supported image") from e


def render_image_watermark(pdf: pikepdf.Pdf, image: Image.Image, style: WatermarkStyle) -> bytes:
    """Draw *image* as a logo watermark, one overlay page per page of *pdf*.

    The logo is drawn at 0.4 point per pixel, times ``style.scale``.
    """
    if not pdf.pages:
        return b""

    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    reader = ImageReader(image)
    scale = WATERMARK_IMAGE_BASE_SCALE * style.scale
    mark_width, mark_height = image.width * scale, image.height * scale

    for page in pdf.pages:
        llx, lly, urx, ury = _page_box(page)
        width, height = urx - llx, ury - lly
        c.setPageSize((width, height))

        x, y = watermark_origin(style.alignment, width, height, mark_width, mark_height)

        c.saveState()
        c.setFillAlpha(style.opacity)
        c.translate(x, y)
        c.rotate(style.rotation)
        c.drawImage(reader, 0, 0, width=mark_width, height=mark_height, mask="auto")
        c.restoreState()
        c.showPage()

    c.save()
    logger.debug("Rendered %dx%d logo watermark on %d pages", *image.size, len(pdf.pages))
    return buf.getvalue()


def id_card_boxes(
    page_width: float, page_height: float
) -> tuple[tuple[float, float, float, float], tuple[float, float, float, float]]:
    """Front and back boxes (x, y, width, height), stacked from the top of the page."""
    margin = ID_CARD_MARGIN_MM * mm
    width = page_width - 2 * margin
    height = width / ID_CARD_ASPECT_RATIO
    front_y = page_height - margin - height
    back_y = front_y - ID_CARD_GAP_MM * mm - height
    return (margin, front_y, width, height), (margin, back_y, width, height)


def render_id_card(front: Image.Image, back: Image.Image) -> bytes:
    """Draw both sides of a card on one A4 page, each stretched to its box."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    for side, (x, y, w, h) in zip((front, back), id_card_boxes(*A4), strict=True):
        c.drawImage(ImageReader(side), x, y, width=w, height=h, mask="auto")
    c.showPage()
    c.save()
    return buf.getvalue()
