"""
OutputTemplate — Consistent CLI output structure

Builder for structured command output with header, sections and footer.

Usage:
    from stubinvoke.presentation.template import OutputTemplate

    template = OutputTemplate()
    template.header("DEMO deploy", "Deploy the service")
    template.section("PARAMETERS", params_content)
    template.footer("3 parameters")
    print(template.render())
"""

import json
import shutil
from dataclasses import dataclass
from typing import List, Dict, Optional

from .symbols import SymbolSet, get_symbols


# =============================================================================
# Constants
# =============================================================================

HEADER_CHAR = "="
SECTION_CHAR = "-"
DEFAULT_WIDTH = 80
MAX_WIDTH = 100


@dataclass
class TemplateSection:
    """A titled section of output."""
    title: str
    content: str


class OutputTemplate:
    """
    Builder for structured CLI output.

    Creates consistent output with:
    - HEADER: Title and subtitle between rules
    - SECTIONS: Titled content blocks
    - FOOTER: Summary line and optional hint
    """

    def __init__(
        self,
        symbols: Optional[SymbolSet] = None,
        width: Optional[int] = None
    ):
        self.symbols = symbols or get_symbols()
        self.width = min(width or shutil.get_terminal_size().columns or DEFAULT_WIDTH, MAX_WIDTH)

        self._title: Optional[str] = None
        self._subtitle: Optional[str] = None
        self._sections: List[TemplateSection] = []
        self._summary: Optional[str] = None
        self._hint: Optional[str] = None

    # =========================================================================
    # Builder Methods
    # =========================================================================

    def header(self, title: str, subtitle: Optional[str] = None) -> "OutputTemplate":
        self._title = title
        self._subtitle = subtitle
        return self

    def section(self, title: str, content: str) -> "OutputTemplate":
        """Add a titled section (skipped at render time when empty)."""
        self._sections.append(TemplateSection(title=title, content=content))
        return self

    def footer(self, summary: Optional[str] = None, hint: Optional[str] = None) -> "OutputTemplate":
        self._summary = summary
        self._hint = hint
        return self

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self) -> str:
        """Render template to formatted string."""
        lines: List[str] = []

        if self._title:
            border = HEADER_CHAR * self.width
            title_line = f"{self._title} - {self._subtitle}" if self._subtitle else self._title
            lines.extend([border, title_line, border, ""])

        for section in self._sections:
            if not section.content:
                continue
            if section.title:
                lines.append(section.title)
                lines.append(SECTION_CHAR * len(section.title))
            lines.append(section.content)
            lines.append("")

        if self._summary or self._hint:
            lines.append(SECTION_CHAR * self.width)
            if self._summary:
                lines.append(self._summary)
            if self._hint:
                lines.append(f"{self.symbols.arrow} {self._hint}")

        return "\n".join(lines).rstrip("\n")

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def format_table(
        self,
        rows: List[Dict[str, str]],
        columns: List[str],
        keys: Optional[List[str]] = None
    ) -> str:
        """
        Format data as simple aligned table (grep-parseable).

        Args:
            rows: List of dicts with data
            columns: Column headers
            keys: Dict keys for columns (defaults to lowercase headers)
        """
        if not rows:
            return ""

        keys = keys or [c.lower().replace(" ", "_") for c in columns]

        widths = [len(c) for c in columns]
        for row in rows:
            for i, key in enumerate(keys):
                widths[i] = max(widths[i], len(str(row.get(key, ""))))

        lines: List[str] = []
        lines.append("  ".join(col.ljust(widths[i]) for i, col in enumerate(columns)).rstrip())
        for row in rows:
            cells = [str(row.get(key, "")).ljust(widths[i]) for i, key in enumerate(keys)]
            lines.append("  ".join(cells).rstrip())

        return "\n".join(lines)

    def format_list(self, items: List[str], bullet: Optional[str] = None) -> str:
        """Format items as bulleted list."""
        if not items:
            return ""
        bullet = bullet or self.symbols.bullet
        return "\n".join(f"{bullet} {item}" for item in items)


# =============================================================================
# Row Rendering
# =============================================================================

VALID_FORMATS = ("auto", "table", "list", "json")


def render_rows(
    rows: List[Dict[str, str]],
    columns: List[str],
    keys: Optional[List[str]] = None,
    format: str = "auto",
    symbols: Optional[SymbolSet] = None,
    empty_message: str = "Nothing to display."
) -> str:
    """
    Render homogeneous rows as table, list or JSON.

    "auto" picks a table for two or more rows and a list otherwise.
    JSON output is emitted even when empty ([]), for piping.
    """
    if format not in VALID_FORMATS:
        raise ValueError(f"Unknown format '{format}'. Valid: {', '.join(VALID_FORMATS)}")

    keys = keys or [c.lower().replace(" ", "_") for c in columns]
    if format == "json":
        return json.dumps([{k: row.get(k) for k in keys} for row in rows], indent=2)
    if not rows:
        return empty_message

    template = OutputTemplate(symbols=symbols)
    if format == "table" or (format == "auto" and len(rows) >= 2):
        return template.format_table(rows, columns, keys)

    items = []
    for row in rows:
        values = [str(row.get(k, "")) for k in keys]
        head, rest = values[0], [v for v in values[1:] if v]
        items.append(f"{head} - {' - '.join(rest)}" if rest else head)
    return template.format_list(items)
