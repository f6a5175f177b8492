#!/usr/bin/env python3
"""
PdfSuite - Entry point for python -m pdfsuite

This module allows the package to be run as a module:
    python -m pdfsuite
"""

import sys

from pdfsuite import main

if __name__ == "__main__":
    sys.exit(main())
