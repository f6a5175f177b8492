"""
PdfSuite - Tool Catalogue

Registry of the available tools, grouped by category, used by the CLI
`tools` command and to derive default output file names.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pdfsuite.utils.i18n import N_, _


class ToolCategory(Enum):
    CONVERT = "convert"
    ORGANIZE = "organize"
    SECURITY = "security"
    OPTIMIZE = "optimize"
    EDIT = "edit"


@dataclass(frozen=True)
class PDFTool:
    """A single tool offered by the suite.

    Attributes:
        id: Stable identifier (also the CLI sub-command)
        name: Display name (translatable)
        description: One-line description (translatable)
        category: Grouping for listings
        popular: Highlighted in listings
    """

    id: str
    name: str
    description: str
    category: ToolCategory
    popular: bool = False


TOOLS: tuple[PDFTool, ...] = (
    PDFTool(
        "merge",
        N_("Merge PDF"),
        N_("Combine multiple PDFs into one unified document."),
        ToolCategory.ORGANIZE,
        popular=True,
    ),
    PDFTool(
        "split",
        N_("Split PDF"),
        N_("Separate every page of your PDF into its own file."),
        ToolCategory.ORGANIZE,
    ),
    PDFTool(
        "extract",
        N_("Extract Pages"),
        N_("Pull specific pages out of your PDF into a new document."),
        ToolCategory.ORGANIZE,
    ),
    PDFTool(
        "delete",
        N_("Delete Pages"),
        N_("Remove unnecessary pages from your PDF file."),
        ToolCategory.ORGANIZE,
    ),
    PDFTool(
        "reorder",
        N_("Reorder Pages"),
        N_("Rearrange the sequence of pages in your PDF."),
        ToolCategory.ORGANIZE,
    ),
    PDFTool(
        "rotate",
        N_("Rotate PDF"),
        N_("Rotate PDF pages by 90, 180 or 270 degrees."),
        ToolCategory.ORGANIZE,
    ),
    PDFTool(
        "crop",
        N_("Crop PDF"),
        N_("Trim PDF margins for a cleaner layout."),
        ToolCategory.EDIT,
    ),
    PDFTool(
        "number",
        N_("Page Numbers"),
        N_("Add page numbers with custom position, size and colour."),
        ToolCategory.EDIT,
    ),
    PDFTool(
        "watermark",
        N_("Watermark"),
        N_("Stamp a text or logo watermark on every page."),
        ToolCategory.EDIT,
    ),
    PDFTool(
        "compress",
        N_("Compress PDF"),
        N_("Reduce file size by re-encoding embedded images."),
        ToolCategory.OPTIMIZE,
        popular=True,
    ),
    PDFTool(
        "repair",
        N_("Repair PDF"),
        N_("Rebuild damaged cross-reference tables and re-save the document."),
        ToolCategory.OPTIMIZE,
    ),
    PDFTool(
        "images",
        N_("Images to PDF"),
        N_("Convert JPG and PNG images into a PDF."),
        ToolCategory.CONVERT,
    ),
    PDFTool(
        "idcard",
        N_("ID Card Merge"),
        N_("Put the front and back of an ID card on one page."),
        ToolCategory.CONVERT,
    ),
    PDFTool(
        "protect",
        N_("Protect PDF"),
        N_("Encrypt your PDF with a password."),
        ToolCategory.SECURITY,
    ),
    PDFTool(
        "unlock",
        N_("Unlock PDF"),
        N_("Remove the password from a protected PDF."),
        ToolCategory.SECURITY,
    ),
)


def get_tool(tool_id: str) -> PDFTool:
    for tool in TOOLS:
        if tool.id == tool_id:
            return tool
    raise KeyError(tool_id)


def tools_by_category() -> dict[ToolCategory, list[PDFTool]]:
    """Group the catalogue by category, keeping declaration order."""
    grouped: dict[ToolCategory, list[PDFTool]] = {}
    for tool in TOOLS:
        grouped.setdefault(tool.category, []).append(tool)
    return grouped


def format_catalogue() -> str:
    """Human-readable listing of all tools."""
    lines: list[str] = []
    for category, tools in tools_by_category().items():
        lines.append(f"{category.value.capitalize()}:")
        for tool in tools:
            star = " *" if tool.popular else ""
            lines.append(f"  {tool.id:<10} {_(tool.name)}{star} - {_(tool.description)}")
    return "\n".join(lines)


def default_output_path(source: str | Path, prefix: str) -> Path:
    """Derive ``<dir>/<prefix><name>`` next to *source*."""
    source = Path(source)
    return source.with_name(f"{prefix}{source.name}")
