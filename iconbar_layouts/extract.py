"""Recover a structured Grid from icon bar markup."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .errors import (
    DuplicateCellError,
    EmptyRowFragmentError,
    InconsistentRowKeyError,
    InvalidRowKeyError,
    MissingCoordinateError,
    MissingFieldsError,
    MissingIdentifierError,
    NoGridDetectedError,
    TooManyFieldsError,
    UnknownActionKindError,
)
from .markup import (
    CELL_CLASS,
    CELL_PATTERN,
    COORD_PATTERN,
    DEF_PATTERN,
    EMPTY_CLASS,
    ROW_PATTERN,
    captures,
    class_tokens,
    decode_payload,
    first_capture,
    split_fields,
)
from .models import ActionKind, Grid, Icon, Row

UNINITIALISED_ROW_KEY = -1
MIN_FIELDS = 2
MAX_FIELDS = 4


def parse_icon(fragment: str) -> Icon:
    """Parse the markup of one populated cell into an Icon."""

    found = first_capture(DEF_PATTERN, fragment)
    fields = split_fields(decode_payload(found.groups.get("payload", ""))) if found else []

    if len(fields) < MIN_FIELDS:
        raise MissingFieldsError(fragment, len(fields))
    if len(fields) > MAX_FIELDS:
        raise TooManyFieldsError(fragment, len(fields))

    identifier, kind_text = fields[0], fields[1]
    if not identifier:
        raise MissingIdentifierError(fragment)
    try:
        kind = ActionKind(kind_text)
    except ValueError:
        raise UnknownActionKindError(fragment, kind_text) from None

    value = fields[2] if len(fields) > 2 else None
    label = fields[3] if len(fields) > 3 else None
    if kind.uses_target:
        return Icon(identifier, kind, target=value, label=label)
    return Icon(identifier, kind, macro=value, label=label)


def parse_row(fragment: str) -> Row:
    """Parse every cell of one row container into a Row."""

    row_key: Optional[int] = None
    cells: Dict[int, Icon] = {}
    seen: Dict[int, Tuple[int, int]] = {}

    for cell in captures(CELL_PATTERN, fragment):
        attrs = cell.groups.get("attrs", "")
        tokens = class_tokens(attrs)
        if CELL_CLASS not in tokens:
            continue

        coord = first_capture(COORD_PATTERN, attrs)
        if coord is None:
            raise MissingCoordinateError(cell.text)
        column = int(coord.groups["column"])
        key = int(coord.groups["row_key"])

        if key == UNINITIALISED_ROW_KEY:
            raise InvalidRowKeyError(cell.text, key)
        if row_key is None:
            row_key = key
        elif key != row_key:
            raise InconsistentRowKeyError(fragment, row_key, key)

        if column in seen:
            raise DuplicateCellError(fragment, seen[column], (column, key))
        seen[column] = (column, key)

        if EMPTY_CLASS not in tokens:
            cells[column] = parse_icon(cell.text)

    if row_key is None:
        raise EmptyRowFragmentError(fragment)
    return Row(row_key, cells)


def parse_grid(page: str) -> Grid:
    """Split a page into row containers and parse each, in document order."""

    rows = {index: parse_row(found.groups.get("body", "")) for index, found in enumerate(captures(ROW_PATTERN, page))}
    if not rows:
        raise NoGridDetectedError(page)
    return Grid(rows)
