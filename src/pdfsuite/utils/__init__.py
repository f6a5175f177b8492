"""
PdfSuite - Utils Package

Utility modules for the application.

The logger lives in ``pdfsuite.utils.logger``; it is not re-exported here
because it reads its defaults from ``pdfsuite.config``, which itself
imports ``pdfsuite.utils.i18n``.
"""

from pdfsuite.utils.i18n import _
from pdfsuite.utils.progress_state import ProcessingState, ProcessingStatus, ProgressTracker

__all__ = [
    "_",
    "ProcessingState",
    "ProcessingStatus",
    "ProgressTracker",
]
