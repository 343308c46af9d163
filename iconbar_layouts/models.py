"""Domain models for icon bar layouts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ActionKind(str, Enum):
    """What an icon does when clicked."""

    GO = "go"
    MACRO = "macro"
    POPUP = "popup"

    @property
    def uses_target(self) -> bool:
        return self is not ActionKind.MACRO


@dataclass(frozen=True)
class Icon:
    """Represents a single configured icon button."""

    icon: str
    action_kind: ActionKind
    target: Optional[str] = None
    macro: Optional[str] = None
    label: Optional[str] = None

    def __post_init__(self) -> None:
        # an empty payload renders the same as an absent one
        for name in ("target", "macro"):
            if getattr(self, name) == "":
                object.__setattr__(self, name, None)
        if not self.icon:
            raise ValueError("icon identifier is required")
        if self.action_kind.uses_target and self.macro is not None:
            raise ValueError(f"{self.action_kind.value} icon {self.icon!r} cannot carry a macro")
        if not self.action_kind.uses_target and self.target is not None:
            raise ValueError(f"macro icon {self.icon!r} cannot carry a target")

    @property
    def value(self) -> Optional[str]:
        """The target URL or macro text, whichever the action kind selects."""

        return self.target if self.action_kind.uses_target else self.macro


@dataclass(frozen=True)
class Row:
    """One visual row. ``row_key`` is an identity, not a position."""

    row_key: int
    cells: Dict[int, Icon] = field(default_factory=dict)

    def columns(self) -> List[int]:
        return sorted(self.cells)


@dataclass(frozen=True)
class Grid:
    """The full layout, keyed by the order rows were encountered in."""

    rows: Dict[int, Row] = field(default_factory=dict)

    def ordered_rows(self) -> List[Row]:
        return [self.rows[index] for index in sorted(self.rows)]

    def row_keys(self) -> List[int]:
        return [row.row_key for row in self.ordered_rows()]

    def row_by_key(self, row_key: int) -> Optional[Row]:
        for row in self.ordered_rows():
            if row.row_key == row_key:
                return row
        return None

    def icon_count(self) -> int:
        return sum(len(row.cells) for row in self.rows.values())

    def same_layout(self, other: "Grid") -> bool:
        """Compare by row keys and cell contents, ignoring row indices."""

        return _layout_key(self) == _layout_key(other)


@dataclass(frozen=True)
class Position:
    """Predicted placement of a newly created icon."""

    column: int
    row_key: int


def _layout_key(grid: Grid) -> List[Tuple[int, Dict[int, Icon]]]:
    return sorted(((row.row_key, row.cells) for row in grid.rows.values()), key=lambda item: item[0])
