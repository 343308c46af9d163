"""Markup patterns, escaping helpers and a renderer for the icon bar widget.

The remote page lays the icon bar out as::

    <div class="iconrow"><div class="icons">
      <span class="icon" data-pos="0,3" data-def="[&amp;quot;sword&amp;quot;,...]">...</span>
      <span class="icon empty" data-pos="1,3"></span>
    </div></div>

``data-def`` holds a quoted, comma separated list of 2-4 fields that the
host escapes twice. ``render_grid`` writes the same contract so parsers can
be exercised against synthetic pages.
"""

from __future__ import annotations

import html
import re
from typing import Dict, Iterator, List, NamedTuple, Optional, Pattern

from .models import Grid, Icon, Row

ROW_PATTERN = re.compile(
    r'<div\s+class="iconrow"\s*>\s*<div\s+class="icons"\s*>(?P<body>.*?)</div>\s*</div>',
    re.IGNORECASE | re.DOTALL,
)
CELL_PATTERN = re.compile(r"<span\b(?P<attrs>[^>]*)>", re.IGNORECASE)
CLASS_PATTERN = re.compile(r'(?<![\w-])class\s*=\s*"(?P<classes>[^"]*)"', re.IGNORECASE)
COORD_PATTERN = re.compile(
    r'(?<![\w-])data-pos\s*=\s*"\s*(?P<column>-?\d+)\s*,\s*(?P<row_key>-?\d+)\s*"',
    re.IGNORECASE,
)
DEF_PATTERN = re.compile(r'(?<![\w-])data-def\s*=\s*"(?P<payload>[^"]*)"', re.IGNORECASE)
FIELD_PATTERN = re.compile(r'"(?P<field>(?:[^"\\]|\\.)*)"', re.DOTALL)

CELL_CLASS = "icon"
EMPTY_CLASS = "empty"

_FIELD_ESCAPE = re.compile(r'\\(["\\])')


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


class Capture(NamedTuple):
    """One match: its span in the source, the matched text and named groups."""

    start: int
    end: int
    text: str
    groups: Dict[str, str]


def captures(pattern: Pattern[str], text: str) -> Iterator[Capture]:
    """Yield every successive match of *pattern* in *text*.

    Each call starts its own scan, so nested passes over fragments of the
    same page never share a position.
    """

    for match in pattern.finditer(text):
        groups = {name: value for name, value in match.groupdict().items() if value is not None}
        yield Capture(match.start(), match.end(), match.group(0), groups)


def first_capture(pattern: Pattern[str], text: str) -> Optional[Capture]:
    return next(captures(pattern, text), None)


def class_tokens(attrs: str) -> List[str]:
    found = first_capture(CLASS_PATTERN, attrs)
    return found.groups["classes"].split() if found else []


# ---------------------------------------------------------------------------
# Definition payloads
# ---------------------------------------------------------------------------


def decode_payload(payload: str) -> str:
    """Undo the host's double entity escaping, then its escaped slashes."""

    return html.unescape(html.unescape(payload)).replace("\\/", "/")


def split_fields(decoded: str) -> List[str]:
    return [_FIELD_ESCAPE.sub(r"\1", found.groups["field"]) for found in captures(FIELD_PATTERN, decoded)]


def icon_fields(icon: Icon) -> List[str]:
    fields = [icon.icon, icon.action_kind.value]
    if icon.value is not None or icon.label is not None:
        fields.append(icon.value or "")
    if icon.label is not None:
        fields.append(icon.label)
    return fields


def encode_fields(fields: List[str]) -> str:
    """Serialise fields the way the host does, including both escaping passes."""

    quoted = ",".join(
        '"%s"' % field.replace("\\", "\\\\").replace('"', '\\"').replace("/", "\\/") for field in fields
    )
    once = html.escape(f"[{quoted}]", quote=True).replace(",", "&#44;")
    return html.escape(once, quote=True)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_cell(icon: Icon, column: int, row_key: int) -> str:
    alt = html.escape(icon.label or icon.icon, quote=True)
    return (
        f'<span class="{CELL_CLASS}" data-pos="{column},{row_key}" data-def="{encode_fields(icon_fields(icon))}">'
        f'<img src="/images/icons/{html.escape(icon.icon, quote=True)}.gif" alt="{alt}"></span>'
    )


def render_placeholder(column: int, row_key: int) -> str:
    return f'<span class="{CELL_CLASS} {EMPTY_CLASS}" data-pos="{column},{row_key}"></span>'


def render_row(row: Row) -> str:
    columns = row.columns()
    width = columns[-1] + 2 if columns else 1
    cells = [
        render_cell(row.cells[column], column, row.row_key)
        if column in row.cells
        else render_placeholder(column, row.row_key)
        for column in range(width)
    ]
    return '<div class="iconrow"><div class="icons">' + "".join(cells) + "</div></div>"


def render_grid(grid: Grid) -> str:
    """Render *grid* as an icon bar page; gaps and one trailing slot are placeholders."""

    parts = ['<div id="iconbar">']
    parts.extend(render_row(row) for row in grid.ordered_rows())
    parts.append("</div>")
    return "\n".join(parts)
