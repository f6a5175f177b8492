"""
PdfSuite - Python package of PDF utilities

Split, extract, delete, reorder, merge, rotate, crop, stamp, protect,
repair and compress PDF documents from the command line or from Python.
"""

import locale
import sys

__version__ = "1.0.0"
__license__ = "GPL-3.0"


def setup_i18n() -> None:
    """Initialize the process locale for translated messages."""
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        # Fallback to C locale if system locale is not properly configured
        locale.setlocale(locale.LC_ALL, "C")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application.

    Returns:
        The process exit code.
    """
    setup_i18n()

    from pdfsuite.cli import main as cli_main

    return cli_main(argv)


__all__ = ["main", "__version__", "__license__", "setup_i18n"]


if __name__ == "__main__":
    sys.exit(main())
