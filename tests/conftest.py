from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlsplit

import pytest

from iconbar_layouts.client import IconbarClient
from iconbar_layouts.markup import render_grid
from iconbar_layouts.models import ActionKind, Grid, Icon, Row
from iconbar_layouts.placement import predict_position

BASE_URL = "http://iconbar.test"

HOME = Icon("home", ActionKind.GO, target="/main.php", label="Home")
MAP = Icon("map", ActionKind.POPUP, target="/map.php?zoom=2&x=1")


class FakeIconbar:
    """In-memory stand-in for the remote icon bar, used as a transport.

    Rows are rendered in row-key order, deletes close the gap they leave,
    and ``fail_at`` makes the n-th request raise before it takes effect.
    """

    def __init__(self, baseline: Optional[Dict[int, Icon]] = None, fail_at: Optional[int] = None) -> None:
        self.baseline = dict(baseline if baseline is not None else {0: HOME, 1: MAP})
        self.rows: Dict[int, Dict[int, Icon]] = {0: dict(self.baseline), 3: {0: MAP}}
        self.calls: List[Tuple[str, Dict[str, str]]] = []
        self.fail_at = fail_at

    def __call__(self, url: str) -> str:
        query = dict(parse_qsl(urlsplit(url).query))
        action = query.pop("action", "state")
        self.calls.append((action, query))
        if self.fail_at is not None and len(self.calls) == self.fail_at:
            raise ConnectionError("connection reset by peer")
        getattr(self, f"_{action}")(query)
        return "<html><body>" + render_grid(self.grid()) + "</body></html>"

    def actions(self) -> List[str]:
        return [action for action, _ in self.calls]

    def grid(self) -> Grid:
        return Grid({index: Row(key, dict(self.rows[key])) for index, key in enumerate(sorted(self.rows))})

    def _state(self, query: Dict[str, str]) -> None:
        pass

    def _reset(self, query: Dict[str, str]) -> None:
        self.rows = {0: dict(self.baseline)}

    def _update(self, query: Dict[str, str]) -> None:
        self.rows.setdefault(int(query["row"]), {})[int(query["col"])] = _icon(query)

    def _create(self, query: Dict[str, str]) -> None:
        position = predict_position(self.grid())
        self.rows.setdefault(position.row_key, {})[position.column] = _icon(query)

    def _move(self, query: Dict[str, str]) -> None:
        source = self.rows.setdefault(int(query["fromrow"]), {})
        dest = self.rows.setdefault(int(query["torow"]), {})
        moving = source.pop(int(query["fromcol"]), None)
        displaced = dest.pop(int(query["tocol"]), None)
        if moving is not None:
            dest[int(query["tocol"])] = moving
        if displaced is not None:
            source[int(query["fromcol"])] = displaced

    def _delete(self, query: Dict[str, str]) -> None:
        column = int(query["col"])
        row = self.rows[int(query["row"])]
        row.pop(column)
        self.rows[int(query["row"])] = {col - 1 if col > column else col: icon for col, icon in row.items()}


def _icon(query: Dict[str, str]) -> Icon:
    kind = ActionKind(query["kind"])
    if kind.uses_target:
        return Icon(query["icon"], kind, target=query.get("value"), label=query.get("label"))
    return Icon(query["icon"], kind, macro=query.get("value"), label=query.get("label"))


@pytest.fixture
def fake() -> FakeIconbar:
    return FakeIconbar()


@pytest.fixture
def client(fake: FakeIconbar) -> IconbarClient:
    return IconbarClient(BASE_URL, transport=fake)
