"""
PdfSuite - Page Selection

Turns what a user enters (a text range such as "1, 3, 5-8", a set of
toggled pages, or a list of pages to remove) into the ordered, zero-based
page index sequence consumed by the transformer.
"""

import logging
import re
from collections.abc import Iterable

from pdfsuite.utils.exceptions import InvalidSelectionError, NoValidPagesError

logger = logging.getLogger(__name__)

# Leading digits of a token; trailing junk is ignored ("3a" is page 3)
_PAGE_NUMBER = re.compile(r"\s*\+?([0-9]+)")


def _parse_page_number(token: str) -> int | None:
    """Parse a one-based page number, returning the zero-based index or None."""
    match = _PAGE_NUMBER.match(token)
    if match is None:
        return None
    return int(match.group(1)) - 1


def iter_range_expression(text: str, page_count: int) -> Iterable[int]:
    """Yield zero-based indices for a comma-separated range expression.

    Out-of-range and malformed tokens are skipped rather than rejected.
    """
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue

        if "-" in token:
            start_s, end_s = token.split("-")[:2]
            start = _parse_page_number(start_s)
            end = _parse_page_number(end_s)
            if start is None or end is None:
                logger.debug("Dropping malformed range token %r", token)
                continue
            for idx in range(start, end + 1):
                if 0 <= idx < page_count:
                    yield idx
            continue

        idx = _parse_page_number(token)
        if idx is None:
            logger.debug("Dropping malformed page token %r", token)
        elif 0 <= idx < page_count:
            yield idx
        else:
            logger.debug("Dropping out-of-range page %s (document has %d)", token, page_count)


def parse_selection(text: str, page_count: int) -> list[int]:
    """Parse a text range expression into an ordered list of page indices.

    Supports: "3", "1-5", "1,3,7", "1-3,7,10-12". Page numbers are one-based
    on input and zero-based on output. Duplicates are kept, so "1,1,1"
    selects the first page three times.

    Args:
        text: Range expression entered by the user.
        page_count: Number of pages in the source document.

    Returns:
        Zero-based indices in the order they were entered.

    Raises:
        NoValidPagesError: If no token resolves to a page of the document.
    """
    indices = list(iter_range_expression(text or "", page_count))
    if not indices:
        raise NoValidPagesError(selection=text, page_count=page_count)
    return indices


def selection_from_indices(indices: Iterable[int], page_count: int) -> list[int]:
    """Build a selection from a set of toggled zero-based page indices.

    Set-based selections only record membership, so the result is always in
    ascending order without duplicates.

    Raises:
        NoValidPagesError: If no index lies inside the document.
    """
    selected = sorted({i for i in indices if 0 <= i < page_count})
    if not selected:
        raise NoValidPagesError(page_count=page_count)
    return selected


def selection_from_page_numbers(pages: Iterable[int], page_count: int) -> list[int]:
    """Convert an explicit one-based order list into zero-based indices.

    Order and duplicates are preserved; pages outside the document are dropped.

    Raises:
        NoValidPagesError: If no page lies inside the document.
    """
    indices = [p - 1 for p in pages if 1 <= p <= page_count]
    if not indices:
        raise NoValidPagesError(page_count=page_count)
    return indices


def pages_to_keep(deleted: Iterable[int], page_count: int) -> list[int]:
    """Return the ascending indices that survive deleting *deleted*.

    Args:
        deleted: Zero-based indices to remove (duplicates are irrelevant).
        page_count: Number of pages in the source document.

    Raises:
        NoValidPagesError: If none of the indices to delete exists.
        InvalidSelectionError: If every page would be deleted.
    """
    removed = {i for i in deleted if 0 <= i < page_count}
    if not removed:
        raise NoValidPagesError(page_count=page_count)

    kept = [i for i in range(page_count) if i not in removed]
    if not kept:
        raise InvalidSelectionError("You cannot delete all pages.", indices=sorted(removed))
    return kept


def validate_selection(selection: list[int], page_count: int) -> None:
    """Check that a selection is non-empty and references real pages only.

    Raises:
        NoValidPagesError: If the selection is empty.
        InvalidSelectionError: If an index falls outside the document.
    """
    if not selection:
        raise NoValidPagesError(page_count=page_count)
    invalid = [i for i in selection if not 0 <= i < page_count]
    if invalid:
        raise InvalidSelectionError(
            f"Selection references pages outside the document ({page_count} pages)",
            indices=invalid,
        )
