"""
PdfSuite - Numeric Constants

Simple numeric constants with ZERO internal imports to avoid circular dependencies.
For application-level constants (strings, paths), use config.py.
"""

from typing import Final

# ============================================================================
# Size Constants
# ============================================================================

BYTES_PER_MB: Final[int] = 1024 * 1024

# ============================================================================
# Image Dimension Thresholds (compression)
# ============================================================================

MIN_IMAGE_DIMENSION_PX: Final[int] = 64
DEFAULT_IMAGE_QUALITY: Final[int] = 60
DEFAULT_IMAGE_DPI: Final[int] = 150

# Re-encoded image is kept only below this fraction of the original size
IMAGE_REPLACE_RATIO: Final[float] = 0.90

# ============================================================================
# Page Geometry
# ============================================================================

POINTS_PER_INCH: Final[float] = 72.0
VALID_ROTATIONS: Final[tuple[int, ...]] = (0, 90, 180, 270)

# Minimum half-extent kept when cropping margins
CROP_SAFETY_PT: Final[float] = 5.0
DEFAULT_CROP_MARGIN_PT: Final[float] = 20.0

# ============================================================================
# Stamping (page numbers, watermarks)
# ============================================================================

NUMBER_SIDE_MARGIN_PT: Final[float] = 40.0
NUMBER_BOTTOM_MARGIN_PT: Final[float] = 30.0
NUMBER_TOP_MARGIN_PT: Final[float] = 40.0
DEFAULT_NUMBER_FONT_SIZE: Final[float] = 10.0

WATERMARK_MARGIN_PT: Final[float] = 50.0
WATERMARK_BASE_FONT_SIZE: Final[float] = 50.0
DEFAULT_WATERMARK_OPACITY: Final[float] = 0.4
DEFAULT_WATERMARK_ROTATION: Final[int] = 45

DEFAULT_STAMP_COLOR: Final[str] = "#64748b"

# Logo watermark size relative to the image's pixel size
WATERMARK_IMAGE_BASE_SCALE: Final[float] = 0.4

# ============================================================================
# ID Card Sheet (A4, millimetres)
# ============================================================================

ID_CARD_MARGIN_MM: Final[float] = 20.0
ID_CARD_GAP_MM: Final[float] = 10.0

# Width to height of an ID-1 card (85.6mm x 54mm)
ID_CARD_ASPECT_RATIO: Final[float] = 1.58
