"""Exceptions raised while reading or driving the remote icon bar."""

from __future__ import annotations

from typing import Optional, Tuple

Coordinate = Tuple[int, int]


def _clip(text: str, limit: int = 160) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


class LayoutError(RuntimeError):
    """Root of every error this package raises on purpose."""


# ---------------------------------------------------------------------------
# Markup parsing
# ---------------------------------------------------------------------------


class ParseError(LayoutError):
    """Raised when markup does not match the expected icon bar contract."""

    def __init__(self, message: str, fragment: str = "") -> None:
        self.fragment = fragment
        if fragment:
            message = f"{message} in {_clip(fragment)!r}"
        super().__init__(message)


class MissingFieldsError(ParseError):
    def __init__(self, fragment: str, count: int) -> None:
        self.count = count
        super().__init__(f"icon definition has {count} field(s), expected at least 2", fragment)


class TooManyFieldsError(ParseError):
    def __init__(self, fragment: str, count: int) -> None:
        self.count = count
        super().__init__(f"icon definition has {count} fields, expected at most 4", fragment)


class MissingIdentifierError(ParseError):
    def __init__(self, fragment: str) -> None:
        super().__init__("icon definition has an empty identifier", fragment)


class UnknownActionKindError(ParseError):
    def __init__(self, fragment: str, kind: str) -> None:
        self.kind = kind
        super().__init__(f"unknown action kind {kind!r}", fragment)


class MissingCoordinateError(ParseError):
    def __init__(self, fragment: str) -> None:
        super().__init__("icon cell has no coordinate attribute", fragment)


class InvalidRowKeyError(ParseError):
    def __init__(self, fragment: str, row_key: int) -> None:
        self.row_key = row_key
        super().__init__(f"row key {row_key} marks an uninitialised row", fragment)


class InconsistentRowKeyError(ParseError):
    def __init__(self, fragment: str, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"row key {actual} differs from row key {expected} set by the first cell", fragment)


class DuplicateCellError(ParseError):
    def __init__(self, fragment: str, first: Coordinate, second: Coordinate) -> None:
        self.first = first
        self.second = second
        super().__init__(
            f"column {second[0]} appears twice (cells {first[0]},{first[1]} and {second[0]},{second[1]})",
            fragment,
        )


class EmptyRowFragmentError(ParseError):
    def __init__(self, fragment: str) -> None:
        super().__init__("row container holds no icon cells", fragment)


class NoGridDetectedError(ParseError):
    def __init__(self, fragment: str) -> None:
        super().__init__("page contains no icon bar rows", fragment)


# ---------------------------------------------------------------------------
# Remote calls and storage
# ---------------------------------------------------------------------------


class RemoteCallError(LayoutError):
    """Raised when the remote icon bar could not be reached or answered badly."""

    def __init__(self, operation: str, url: Optional[str], reason: str) -> None:
        self.operation = operation
        self.url = url
        where = f" ({url})" if url else ""
        super().__init__(f"{operation} failed{where}: {reason}")


class PresetStoreError(LayoutError):
    """Raised when a preset file exists but cannot be read back."""
