#!/usr/bin/env python3
"""
PdfSuite CLI — PDF utility suite from the terminal.

Usage:
    python -m pdfsuite <command> [options]

Commands:
    split       Split every page into its own file (zipped by default)
    extract     Extract pages to a new PDF
    delete      Delete pages
    reorder     Reorder or reverse pages
    merge       Merge multiple PDFs into one
    rotate      Rotate pages
    crop        Trim page margins
    number      Add page numbers
    watermark   Stamp a text or logo watermark
    protect     Encrypt with a password
    unlock      Remove a known password
    repair      Rebuild a damaged PDF
    compress    Compress PDF (reduce file size)
    images      Convert images to a PDF
    idcard      Put both sides of an ID card on one page
    info        Show PDF metadata and page count
    tools       List all tools

Examples:
    # Split into Page_1.pdf, Page_2.pdf... inside report_pages.zip
    pdfsuite split report.pdf

    # Extract pages, keeping the order given
    pdfsuite extract report.pdf --pages "1, 3, 5-8" -o selection.pdf
    pdfsuite extract report.pdf --pages "2,4" --separate -o pages.zip

    # Delete
    pdfsuite delete report.pdf --pages 2-4

    # Merge
    pdfsuite merge a.pdf b.pdf c.pdf -o merged.pdf

    # Stamp
    pdfsuite number report.pdf --position br
    pdfsuite watermark report.pdf --text DRAFT --opacity 0.3
    pdfsuite watermark report.pdf --image logo.png --alignment br

    # Security
    pdfsuite protect report.pdf --password secret
    pdfsuite unlock locked_report.pdf --password secret
"""

import argparse
import logging
import sys
from pathlib import Path

from pdfsuite.config import (
    APP_DESCRIPTION,
    APP_NAME,
    APP_VERSION,
    ARCHIVE_EXTENSION,
    DEFAULT_ID_CARD_NAME,
    DEFAULT_IMAGES_NAME,
    DEFAULT_MERGED_NAME,
)
from pdfsuite.utils.exceptions import PdfSuiteError
from pdfsuite.utils.i18n import _

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _parse_order(text: str) -> list[int]:
    """Parse an explicit page order such as "3,1,2" into one-based numbers.

    Raises:
        ValueError: If a token is not an integer.
    """
    order: list[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            order.append(int(part))
        except ValueError:
            raise ValueError(
                f"Invalid page order '{part}'. Use page numbers like '3,1,2'."
            ) from None
    return order


def _parse_page_list(text: str) -> list[int]:
    """Parse "1,3,5-7" into sorted one-based page numbers (for rotate)."""
    pages: set[int] = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start_s, end_s = part.split("-", 1)
                pages.update(range(int(start_s.strip()), int(end_s.strip()) + 1))
            else:
                pages.add(int(part))
        except ValueError:
            raise ValueError(
                f"Invalid page specification '{part}'. "
                "Use numbers and ranges like '1-5' or '1,3,7'."
            ) from None
    return sorted(p for p in pages if p >= 1)


def _default_output(source: Path, tool: str) -> Path:
    """Output path next to *source* using the configured prefix for *tool*."""
    from pdfsuite.services.tools import default_output_path
    from pdfsuite.utils.config_manager import get_config_manager

    return default_output_path(source, get_config_manager().output_prefix(tool))


def _setting(key_path: str, value):
    """Return *value* if given on the command line, else the configured default."""
    if value is not None:
        return value
    from pdfsuite.utils.config_manager import get_config_manager

    return get_config_manager().get(key_path)


class _ProgressPrinter:
    """Progress callback that advances a ProcessingState and prints to stderr.

    Updates are throttled by a ProgressTracker. :meth:`finish` moves the
    state to SUCCESS or ERROR from the tool's OperationResult.
    """

    def __init__(self, message: str = "") -> None:
        from pdfsuite.utils.progress_state import ProcessingState, ProgressTracker

        self.state = ProcessingState().loading(message)
        self._tracker = ProgressTracker()

    def __call__(self, current: int, total: int, message: str) -> None:
        from pdfsuite.utils.progress_state import progress_percent

        self.state = self.state.processing(progress_percent(current, total), message)
        if self._tracker.update(current, total, message):
            print(f"\r[{self.state.progress:3d}%] {message:<40}", end="", file=sys.stderr)
            if self._tracker.fraction >= 1.0:
                print(file=sys.stderr)

    def finish(self, result):
        """Move to the terminal state matching *result* and return it."""
        from pdfsuite.utils.progress_state import ProcessingStatus

        if self.state.status.is_terminal:
            return self.state
        if not result.success:
            self.state = self.state.failed(result.message)
            return self.state
        if self.state.status is ProcessingStatus.LOADING:
            self.state = self.state.processing(100)
        name = Path(result.output_path).name if result.output_path else ""
        self.state = self.state.succeeded(name, result.message)
        return self.state


def _report(result, verb: str, progress: _ProgressPrinter | None = None) -> int:
    """Print an OperationResult and return the exit code."""
    from pdfsuite.utils.progress_state import ProcessingStatus

    state = progress.finish(result) if progress is not None else result.state
    if state.status is ProcessingStatus.SUCCESS:
        print(f"{verb}: {state.message} → {result.output_path}")
        if len(result.output_files) > 1:
            for f in result.output_files:
                print(f"  → {f}")
        return 0
    print(f"Error: {state.message}", file=sys.stderr)
    return 1


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_io(parser: argparse.ArgumentParser, output_help: str) -> None:
    parser.add_argument("input", type=Path, help=_("Input PDF file"))
    parser.add_argument("-o", "--output", type=Path, default=None, help=output_help)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with subcommands."""
    p = argparse.ArgumentParser(
        prog="pdfsuite",
        description=f"{APP_NAME} — {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-v", "--verbose", action="store_true", help=_("Verbose logging (DEBUG)"))
    p.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")

    sub = p.add_subparsers(dest="command", help=_("Available commands"))

    # --- split ---
    split_p = sub.add_parser("split", help=_("Split every page into its own file"))
    _add_io(split_p, _("Output ZIP file, or directory with --no-archive"))
    split_p.add_argument(
        "--pages",
        type=str,
        default=None,
        help=_("Only these pages (e.g. '1-3,7'). Default: all."),
    )
    split_p.add_argument(
        "--archive",
        dest="archive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help=_("Bundle the pages into one ZIP file (default from settings)"),
    )

    # --- extract ---
    extract_p = sub.add_parser("extract", help=_("Extract pages to a new PDF"))
    _add_io(extract_p, _("Output PDF file (ZIP or directory with --separate)"))
    extract_p.add_argument(
        "--pages",
        type=str,
        required=True,
        help=_("Pages to extract (e.g. '1, 3, 5-8'); order is kept"),
    )
    extract_p.add_argument(
        "--separate",
        action="store_true",
        help=_("Write one file per page instead of one document"),
    )
    extract_p.add_argument(
        "--no-archive",
        dest="archive",
        action="store_false",
        help=_("With --separate, write files into a directory instead of a ZIP"),
    )

    # --- delete ---
    delete_p = sub.add_parser("delete", help=_("Remove pages from a PDF"))
    _add_io(delete_p, _("Output PDF file"))
    delete_p.add_argument(
        "--pages",
        type=str,
        required=True,
        help=_("Pages to delete (e.g. '3,5,7' or '2-4')"),
    )

    # --- reorder ---
    reorder_p = sub.add_parser("reorder", help=_("Reorder or reverse pages"))
    _add_io(reorder_p, _("Output PDF file"))
    reorder_grp = reorder_p.add_mutually_exclusive_group(required=True)
    reorder_grp.add_argument(
        "--order",
        type=str,
        metavar="ORDER",
        help=_("New page order (e.g. '3,1,2,5,4')"),
    )
    reorder_grp.add_argument(
        "--reverse",
        action="store_true",
        help=_("Reverse the page order"),
    )

    # --- merge ---
    merge_p = sub.add_parser("merge", help=_("Merge multiple PDFs into one"))
    merge_p.add_argument("inputs", nargs="+", type=Path, help=_("Input PDF files (in order)"))
    merge_p.add_argument("-o", "--output", type=Path, default=None, help=_("Output PDF file"))

    # --- rotate ---
    rotate_p = sub.add_parser("rotate", help=_("Rotate pages in a PDF"))
    _add_io(rotate_p, _("Output PDF file"))
    rotate_p.add_argument(
        "--angle",
        type=int,
        required=True,
        choices=[90, 180, 270, -90],
        help=_("Rotation angle in degrees (clockwise)"),
    )
    rotate_p.add_argument(
        "--pages",
        type=str,
        default=None,
        help=_("Pages to rotate (e.g. '1,3,5' or '1-5'). Default: all."),
    )

    # --- crop ---
    crop_p = sub.add_parser("crop", help=_("Trim page margins"))
    _add_io(crop_p, _("Output PDF file"))
    crop_p.add_argument(
        "--margin",
        type=float,
        default=None,
        metavar="PT",
        help=_("Margin to trim on every side, in points"),
    )

    # --- number ---
    number_p = sub.add_parser("number", help=_("Add page numbers"))
    _add_io(number_p, _("Output PDF file"))
    number_p.add_argument(
        "--position",
        choices=["tl", "tc", "tr", "bl", "bc", "br"],
        default=None,
        help=_("Where to place the number"),
    )
    number_p.add_argument("--font-size", type=float, default=None, help=_("Font size"))
    number_p.add_argument("--color", type=str, default=None, help=_("Colour as #rrggbb"))
    number_p.add_argument(
        "--start-at", type=int, default=None, help=_("Number printed on the first page")
    )

    # --- watermark ---
    wm_p = sub.add_parser("watermark", help=_("Stamp a text or logo watermark"))
    _add_io(wm_p, _("Output PDF file"))
    wm_src = wm_p.add_mutually_exclusive_group()
    wm_src.add_argument("--text", type=str, default=None, help=_("Watermark text"))
    wm_src.add_argument(
        "--image", type=Path, default=None, help=_("Logo image to stamp instead of text")
    )
    wm_p.add_argument("--opacity", type=float, default=None, help=_("Opacity (0-1)"))
    wm_p.add_argument("--rotation", type=float, default=None, help=_("Rotation in degrees"))
    wm_p.add_argument("--scale", type=float, default=None, help=_("Size multiplier"))
    wm_p.add_argument("--color", type=str, default=None, help=_("Colour as #rrggbb"))
    wm_p.add_argument(
        "--alignment",
        choices=["TL", "TC", "TR", "ML", "MC", "MR", "BL", "BC", "BR"],
        type=str.upper,
        default=None,
        help=_("Placement on the page"),
    )

    # --- protect ---
    protect_p = sub.add_parser("protect", help=_("Encrypt a PDF with a password"))
    _add_io(protect_p, _("Output PDF file"))
    protect_p.add_argument("--password", type=str, required=True, help=_("Open password"))
    protect_p.add_argument(
        "--owner-password",
        type=str,
        default=None,
        help=_("Permissions password (default: same as --password)"),
    )

    # --- unlock ---
    unlock_p = sub.add_parser("unlock", help=_("Remove the password from a PDF"))
    _add_io(unlock_p, _("Output PDF file"))
    unlock_p.add_argument("--password", type=str, required=True, help=_("Current password"))

    # --- repair ---
    repair_p = sub.add_parser("repair", help=_("Rebuild a damaged PDF"))
    _add_io(repair_p, _("Output PDF file"))

    # --- compress ---
    compress_p = sub.add_parser("compress", help=_("Compress PDF to reduce file size"))
    _add_io(compress_p, _("Output PDF file"))
    compress_p.add_argument(
        "--quality",
        type=int,
        default=None,
        metavar="Q",
        help=_("JPEG quality for images (1-95, default: 60)"),
    )
    compress_p.add_argument(
        "--dpi",
        type=int,
        default=None,
        metavar="DPI",
        help=_("Target DPI for images (default: 150)"),
    )

    # --- images ---
    images_p = sub.add_parser("images", help=_("Convert images to a PDF"))
    images_p.add_argument("inputs", nargs="+", type=Path, help=_("Image files (in order)"))
    images_p.add_argument("-o", "--output", type=Path, default=None, help=_("Output PDF file"))

    # --- idcard ---
    idcard_p = sub.add_parser("idcard", help=_("Put both sides of an ID card on one page"))
    idcard_p.add_argument("front", type=Path, help=_("Image of the front side"))
    idcard_p.add_argument("back", type=Path, help=_("Image of the back side"))
    idcard_p.add_argument("-o", "--output", type=Path, default=None, help=_("Output PDF file"))

    # --- info ---
    info_p = sub.add_parser("info", help=_("Show PDF metadata and page count"))
    info_p.add_argument("input", type=Path, help=_("Input PDF file"))
    info_p.add_argument("--password", type=str, default="", help=_("Password, if encrypted"))

    # --- tools ---
    sub.add_parser("tools", help=_("List all available tools"))

    return p


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_split(args, logger) -> int:
    """Handle the 'split' command."""
    from pdfsuite.services.pdf_operations import split_pages

    archive = _setting("split.package_as_archive", args.archive)
    output = args.output
    if output is None:
        stem = f"{args.input.stem}_pages"
        output = args.input.with_name(f"{stem}.{ARCHIVE_EXTENSION}" if archive else stem)

    progress = _ProgressPrinter()
    result = split_pages(
        args.input,
        output,
        pages=args.pages,
        archive=archive,
        progress_callback=progress,
    )
    return _report(result, "Split", progress)


def _cmd_extract(args, logger) -> int:
    """Handle the 'extract' command."""
    from pdfsuite.services.pdf_operations import extract_pages

    output = args.output
    if output is None:
        output = _default_output(args.input, "extract")
        if args.separate:
            output = output.with_suffix(f".{ARCHIVE_EXTENSION}" if args.archive else "")

    progress = _ProgressPrinter()
    result = extract_pages(
        args.input,
        output,
        args.pages,
        separate=args.separate,
        archive=args.archive,
        progress_callback=progress,
    )
    return _report(result, "Extracted", progress)


def _cmd_delete(args, logger) -> int:
    """Handle the 'delete' command."""
    from pdfsuite.services.pdf_operations import delete_pages

    output = args.output or _default_output(args.input, "delete")
    return _report(delete_pages(args.input, output, args.pages), "Deleted")


def _cmd_reorder(args, logger) -> int:
    """Handle the 'reorder' command."""
    from pdfsuite.services.pdf_operations import reorder_pages, reverse_pages

    output = args.output or _default_output(args.input, "reorder")
    if args.reverse:
        result = reverse_pages(args.input, output)
    else:
        result = reorder_pages(args.input, output, _parse_order(args.order))
    return _report(result, "Reordered")


def _cmd_merge(args, logger) -> int:
    """Handle the 'merge' command."""
    from pdfsuite.services.pdf_operations import merge_pdfs

    for p in args.inputs:
        if not p.exists():
            print(f"Error: {p} not found", file=sys.stderr)
            return 1

    output = args.output or args.inputs[0].with_name(DEFAULT_MERGED_NAME)
    progress = _ProgressPrinter()
    result = merge_pdfs(args.inputs, output, progress_callback=progress)
    return _report(result, "Merged", progress)


def _cmd_rotate(args, logger) -> int:
    """Handle the 'rotate' command."""
    from pdfsuite.services.pdf_operations import rotate_pages

    pages = _parse_page_list(args.pages) if args.pages else None
    output = args.output or _default_output(args.input, "rotate")
    return _report(rotate_pages(args.input, output, args.angle, pages), "Rotated")


def _cmd_crop(args, logger) -> int:
    """Handle the 'crop' command."""
    from pdfsuite.services.pdf_operations import crop_margins

    margin = _setting("crop.margin", args.margin)
    output = args.output or _default_output(args.input, "crop")
    return _report(crop_margins(args.input, output, margin), "Cropped")


def _cmd_number(args, logger) -> int:
    """Handle the 'number' command."""
    from pdfsuite.services.pdf_operations import add_page_numbers
    from pdfsuite.services.stamping import NumberStyle

    style = NumberStyle(
        position=_setting("numbering.position", args.position),
        font_size=_setting("numbering.font_size", args.font_size),
        color=_setting("numbering.color", args.color),
        start_at=_setting("numbering.start_at", args.start_at),
    )
    output = args.output or _default_output(args.input, "number")
    return _report(add_page_numbers(args.input, output, style), "Numbered")


def _cmd_watermark(args, logger) -> int:
    """Handle the 'watermark' command."""
    from pdfsuite.services.pdf_operations import add_watermark
    from pdfsuite.services.stamping import WatermarkStyle

    style = WatermarkStyle(
        opacity=_setting("watermark.opacity", args.opacity),
        rotation=_setting("watermark.rotation", args.rotation),
        scale=_setting("watermark.scale", args.scale),
        color=_setting("watermark.color", args.color),
        alignment=_setting("watermark.alignment", args.alignment),
    )
    if args.image is not None and not args.image.exists():
        print(f"Error: {args.image} not found", file=sys.stderr)
        return 1
    text = "" if args.image else _setting("watermark.text", args.text)
    output = args.output or _default_output(args.input, "watermark")
    result = add_watermark(args.input, output, text, style, image=args.image)
    return _report(result, "Watermarked")


def _cmd_protect(args, logger) -> int:
    """Handle the 'protect' command."""
    from pdfsuite.services.pdf_operations import protect_pdf

    output = args.output or _default_output(args.input, "protect")
    result = protect_pdf(args.input, output, args.password, args.owner_password)
    return _report(result, "Protected")


def _cmd_unlock(args, logger) -> int:
    """Handle the 'unlock' command."""
    from pdfsuite.services.pdf_operations import unlock_pdf

    output = args.output or _default_output(args.input, "unlock")
    return _report(unlock_pdf(args.input, output, args.password), "Unlocked")


def _cmd_repair(args, logger) -> int:
    """Handle the 'repair' command."""
    from pdfsuite.services.pdf_operations import repair_pdf

    output = args.output or _default_output(args.input, "repair")
    return _report(repair_pdf(args.input, output), "Repaired")


def _cmd_compress(args, logger) -> int:
    """Handle the 'compress' command."""
    from pdfsuite.services.pdf_operations import compress_pdf

    output = args.output or _default_output(args.input, "compress")
    progress = _ProgressPrinter()
    result = compress_pdf(
        args.input,
        output,
        image_quality=_setting("compress.image_quality", args.quality),
        image_dpi=_setting("compress.image_dpi", args.dpi),
        progress_callback=progress,
    )
    return _report(result, "Compressed", progress)


def _cmd_images(args, logger) -> int:
    """Handle the 'images' command."""
    from pdfsuite.services.pdf_operations import images_to_pdf

    output = args.output or args.inputs[0].with_name(DEFAULT_IMAGES_NAME)
    progress = _ProgressPrinter()
    result = images_to_pdf(args.inputs, output, progress_callback=progress)
    return _report(result, "Converted", progress)


def _cmd_idcard(args, logger) -> int:
    """Handle the 'idcard' command."""
    from pdfsuite.services.pdf_operations import id_card_merge

    for p in (args.front, args.back):
        if not p.exists():
            print(f"Error: {p} not found", file=sys.stderr)
            return 1

    output = args.output or args.front.with_name(DEFAULT_ID_CARD_NAME)
    return _report(id_card_merge(args.front, args.back, output), "Merged")


def _cmd_info(args, _logger) -> int:
    """Handle the 'info' command."""
    from pdfsuite.services.pdf_operations import get_pdf_info

    info = get_pdf_info(str(args.input), password=args.password)
    print(f"File:       {info.path}")
    print(f"Pages:      {info.page_count}")
    print(f"Size:       {info.file_size_mb:.2f} MB ({info.file_size_bytes:,} bytes)")
    print(f"Version:    PDF {info.pdf_version}")
    print(f"Encrypted:  {'Yes' if info.encrypted else 'No'}")
    if info.title:
        print(f"Title:      {info.title}")
    if info.author:
        print(f"Author:     {info.author}")
    if info.creator:
        print(f"Creator:    {info.creator}")
    return 0


def _cmd_tools(args, _logger) -> int:
    """Handle the 'tools' command."""
    from pdfsuite.services.tools import format_catalogue

    print(format_catalogue())
    return 0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logger = logging.getLogger("pdfsuite.cli")

    # Validate input file existence (merge and images check their 'inputs')
    if getattr(args, "input", None) and not args.input.exists():
        print(f"Error: {args.input} not found", file=sys.stderr)
        return 1

    # Dispatch to command handler
    handlers = {
        "split": _cmd_split,
        "extract": _cmd_extract,
        "delete": _cmd_delete,
        "reorder": _cmd_reorder,
        "merge": _cmd_merge,
        "rotate": _cmd_rotate,
        "crop": _cmd_crop,
        "number": _cmd_number,
        "watermark": _cmd_watermark,
        "protect": _cmd_protect,
        "unlock": _cmd_unlock,
        "repair": _cmd_repair,
        "compress": _cmd_compress,
        "images": _cmd_images,
        "idcard": _cmd_idcard,
        "info": _cmd_info,
        "tools": _cmd_tools,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args, logger)
    except (ValueError, PdfSuiteError) as e:
        # Bad option values, styles or unreadable inputs
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
