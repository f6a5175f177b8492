"""
PdfSuite - Configuration Module

This module contains all configuration constants and paths used by the application.
"""

import logging
import os
from typing import Final

from pdfsuite.utils.i18n import _

# ============================================================================
# Application Constants
# ============================================================================

APP_NAME: Final[str] = "PDF Suite"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = _("Split, merge, organize and secure your PDF documents")


# ============================================================================
# Configuration Directory
# ============================================================================

CONFIG_DIR: Final[str] = os.path.expanduser("~/.config/pdfsuite")
CONFIG_FILE_PATH: Final[str] = os.path.join(CONFIG_DIR, "settings.json")


# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: int = logging.INFO
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME: Final[str] = "PdfSuite"


# ============================================================================
# Output Naming
# ============================================================================

PDF_EXTENSION: Final[str] = "pdf"
ARCHIVE_EXTENSION: Final[str] = "zip"

# Name of each single-page document produced in separate mode
SEPARATE_PAGE_TEMPLATE: Final[str] = "Page_{page}.{ext}"

DEFAULT_COMBINED_NAME: Final[str] = "document.pdf"
DEFAULT_ARCHIVE_NAME: Final[str] = "pages.zip"
DEFAULT_MERGED_NAME: Final[str] = "merged_document.pdf"
DEFAULT_IMAGES_NAME: Final[str] = "images_to_pdf.pdf"
DEFAULT_ID_CARD_NAME: Final[str] = "ID_Card_Merge.pdf"

# Prefix prepended to the source file name for each tool's output
OUTPUT_PREFIXES: Final[dict[str, str]] = {
    "extract": "extracted_",
    "delete": "cleaned_",
    "reorder": "reordered_",
    "rotate": "rotated_",
    "crop": "cropped_",
    "number": "numbered_",
    "watermark": "marked_",
    "protect": "locked_",
    "unlock": "unlocked_",
    "repair": "repaired_",
    "compress": "compressed_",
}
