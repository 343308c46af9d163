"""Predict where the remote service puts a newly created icon.

The server does not document its placement rule. The guess used here is that
it refills the lowest row left empty by a deletion before it appends to the
last row. Treat the result as a hint: callers compare it with the page the
server returns and log any difference.
"""

from __future__ import annotations

from .models import Grid, Position


def predict_position(grid: Grid) -> Position:
    """Return the (column, row_key) the next ``create`` is expected to use."""

    if not grid.rows:
        return Position(0, 0)

    by_key = {row.row_key: row for row in grid.rows.values()}
    max_key = max(by_key)

    target_key = max_key
    for candidate in range(0, max_key + 1):
        if candidate not in by_key:
            target_key = candidate
            break

    row = by_key.get(target_key)
    if row is None or not row.cells:
        return Position(0, target_key)
    return Position(max(row.cells) + 1, target_key)
