"""Drive the remote icon bar until it shows a target Grid.

The remote has no "replace layout" call, so a run is a strict sequence:

1. **Reset**: wipe the remote layout; the reply is a single baseline row.
2. **Clearing**: delete the baseline row's icons one at a time, re-reading
   the page after every delete because remaining icons may shift columns.
3. **Building**: walk the target rows in index order. An empty row is
   materialised with a move of column 0 onto itself; a populated row gets one
   update per cell.
4. **Complete**: the page returned by the last call is the result.

``next_call`` is the pure transition function; ``apply_layout`` feeds it the
parsed reply of each call. Every call is visible remotely as soon as it
returns and nothing is rolled back: a failure leaves built rows in place and
later rows absent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from .client import IconbarClient
from .errors import RemoteCallError
from .extract import parse_grid
from .models import Grid

LOG = logging.getLogger("iconbar.sync")

ProgressCb = Optional[Callable[["Call", Grid], None]]


class Phase(str, Enum):
    RESET = "reset"
    CLEARING = "clearing"
    BUILDING = "building"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Step:
    """Where the run is. ``row``/``cell`` index the target while building."""

    phase: Phase = Phase.RESET
    row: int = 0
    cell: int = 0
    remaining: Optional[int] = None


@dataclass(frozen=True)
class Call:
    """One client operation and its positional arguments."""

    operation: str
    args: Tuple[Any, ...] = ()

    def send(self, client: IconbarClient) -> str:
        return getattr(client, self.operation)(*self.args)


def next_call(current: Optional[Grid], target: Grid, step: Step) -> Tuple[Optional[Call], Step]:
    """Return the next call to issue and the step that follows it.

    ``current`` is the grid parsed from the previous reply (``None`` before
    the reset). A ``None`` call means the run is complete.
    """

    if step.phase is Phase.RESET:
        return Call("reset"), Step(Phase.CLEARING)

    if step.phase is Phase.CLEARING:
        if current is None:
            raise ValueError("clearing requires the grid returned by reset")
        rows = current.ordered_rows()
        baseline = rows[0] if rows else None
        count = len(baseline.cells) if baseline else 0
        if baseline is not None and count:
            if step.remaining is not None and count >= step.remaining:
                raise RemoteCallError(
                    "delete",
                    None,
                    f"row {baseline.row_key} still holds {count} icon(s) after deleting one",
                )
            column = baseline.columns()[0]
            return Call("delete", (column, baseline.row_key)), Step(Phase.CLEARING, remaining=count)
        return next_call(current, target, Step(Phase.BUILDING))

    if step.phase is Phase.BUILDING:
        rows = target.ordered_rows()
        if step.row >= len(rows):
            return None, Step(Phase.COMPLETE)
        row = rows[step.row]
        if not row.cells:
            return Call("move", (0, row.row_key, 0, row.row_key)), Step(Phase.BUILDING, step.row + 1)
        columns = row.columns()
        column = columns[step.cell]
        if step.cell + 1 < len(columns):
            following = Step(Phase.BUILDING, step.row, step.cell + 1)
        else:
            following = Step(Phase.BUILDING, step.row + 1)
        return Call("update", (row.cells[column], column, row.row_key)), following

    return None, step


def apply_layout(client: IconbarClient, target: Grid, progress_cb: ProgressCb = None) -> Grid:
    """Rebuild the remote icon bar as *target* and return the final parsed Grid."""

    LOG.info("applying layout: %d row(s), %d icon(s)", len(target.rows), target.icon_count())
    step = Step()
    current: Optional[Grid] = None
    issued = 0

    while True:
        call, step = next_call(current, target, step)
        if call is None:
            break
        LOG.debug("call %d: %s%r", issued + 1, call.operation, call.args)
        current = parse_grid(call.send(client))
        issued += 1
        if call.operation == "reset" and len(current.rows) != 1:
            LOG.warning("reset returned %d rows; clearing only the first", len(current.rows))
        if progress_cb is not None:
            progress_cb(call, current)

    if current is None:
        raise RemoteCallError("reset", None, "run ended before any reply was parsed")
    LOG.info("layout applied with %d call(s)", issued)
    if not current.same_layout(target):
        LOG.warning(
            "remote layout differs from target: rows %s, expected %s",
            current.row_keys(),
            target.row_keys(),
        )
    return current
