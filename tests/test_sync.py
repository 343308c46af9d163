from __future__ import annotations

import pytest

from conftest import BASE_URL, FakeIconbar
from iconbar_layouts.client import IconbarClient
from iconbar_layouts.errors import NoGridDetectedError, RemoteCallError
from iconbar_layouts.markup import render_grid
from iconbar_layouts.models import ActionKind, Grid, Icon, Row
from iconbar_layouts import sync
from iconbar_layouts.sync import Call, Phase, Step, apply_layout, next_call

A = Icon("a", ActionKind.GO, target="/a.php")
B = Icon("b", ActionKind.MACRO, macro="cast 2 heal", label="Heal")
C = Icon("c", ActionKind.POPUP, target="/c.php", label="C")

TARGET = Grid({0: Row(5, {}), 1: Row(0, {0: A, 1: B, 2: C})})


# ---------------------------------------------------------------------------
# Driving a fake remote
# ---------------------------------------------------------------------------


def test_call_sequence_for_empty_and_populated_rows(fake, client):
    final = apply_layout(client, TARGET)

    assert fake.actions() == ["reset", "delete", "delete", "move", "update", "update", "update"]
    assert fake.calls[1][1] == {"col": "0", "row": "0"}
    assert fake.calls[3][1] == {"fromcol": "0", "fromrow": "5", "tocol": "0", "torow": "5"}
    assert fake.calls[4][1] == {"icon": "a", "kind": "go", "value": "/a.php", "col": "0", "row": "0"}
    assert fake.calls[5][1]["label"] == "Heal"
    assert final.same_layout(TARGET)


def test_delete_count_follows_baseline_size():
    fake = FakeIconbar(baseline={0: A, 1: B, 2: C, 3: A})
    apply_layout(IconbarClient(BASE_URL, transport=fake), TARGET)
    assert fake.actions().count("delete") == 4


def test_empty_baseline_needs_no_deletes():
    fake = FakeIconbar(baseline={})
    apply_layout(IconbarClient(BASE_URL, transport=fake), TARGET)
    assert fake.actions() == ["reset", "move", "update", "update", "update"]


def test_applying_twice_gives_the_same_result(fake, client):
    first = apply_layout(client, TARGET)
    second = apply_layout(client, TARGET)
    assert first == second
    assert second.same_layout(TARGET)


def test_empty_target_leaves_cleared_baseline(client):
    assert apply_layout(client, Grid()) == Grid({0: Row(0, {})})


def test_failure_midway_keeps_rows_already_built():
    fake = FakeIconbar(baseline={}, fail_at=3)
    target = Grid({0: Row(2, {0: A}), 1: Row(4, {0: B})})

    with pytest.raises(RemoteCallError) as info:
        apply_layout(IconbarClient(BASE_URL, transport=fake), target)

    assert info.value.operation == "update"
    assert isinstance(info.value.__cause__, ConnectionError)
    assert fake.rows == {0: {}, 2: {0: A}}


def test_unrecognised_reply_aborts_the_run():
    client = IconbarClient(BASE_URL, transport=lambda url: "<html>down for maintenance</html>")
    with pytest.raises(NoGridDetectedError):
        apply_layout(client, TARGET)


def test_delete_that_does_not_take_effect_is_an_error():
    page = render_grid(Grid({0: Row(0, {0: A})}))
    seen = []

    def stuck(url):
        seen.append(url)
        return page

    with pytest.raises(RemoteCallError) as info:
        apply_layout(IconbarClient(BASE_URL, transport=stuck), TARGET)
    assert info.value.operation == "delete"
    assert len(seen) == 2


def test_progress_callback_sees_every_call(fake, client):
    reported = []
    apply_layout(client, TARGET, progress_cb=lambda call, grid: reported.append(call.operation))
    assert reported == fake.actions()


# ---------------------------------------------------------------------------
# Transition function
# ---------------------------------------------------------------------------


def test_run_starts_with_reset():
    assert next_call(None, TARGET, Step()) == (Call("reset"), Step(Phase.CLEARING))


def test_clearing_deletes_lowest_column_first():
    current = Grid({0: Row(0, {4: B, 1: A})})
    call, step = next_call(current, TARGET, Step(Phase.CLEARING))
    assert call == Call("delete", (1, 0))
    assert step == Step(Phase.CLEARING, remaining=2)


def test_clearing_needs_a_current_grid():
    with pytest.raises(ValueError):
        next_call(None, TARGET, Step(Phase.CLEARING))


def test_cleared_baseline_moves_on_to_building():
    current = Grid({0: Row(0, {})})
    target = Grid({0: Row(7, {})})
    call, step = next_call(current, target, Step(Phase.CLEARING, remaining=1))
    assert call == Call("move", (0, 7, 0, 7))
    assert next_call(current, target, step) == (None, Step(Phase.COMPLETE))


def test_building_updates_cells_in_column_order():
    current = Grid({0: Row(0, {})})
    target = Grid({0: Row(1, {2: B, 0: A})})

    call, step = next_call(current, target, Step(Phase.BUILDING))
    assert call == Call("update", (A, 0, 1))
    call, step = next_call(current, target, step)
    assert call == Call("update", (B, 2, 1))
    assert step == Step(Phase.BUILDING, row=1)


def test_complete_is_terminal():
    assert next_call(None, TARGET, Step(Phase.COMPLETE)) == (None, Step(Phase.COMPLETE))


def test_run_without_any_reply_is_an_error(client, monkeypatch):
    monkeypatch.setattr(sync, "next_call", lambda current, target, step: (None, step))
    with pytest.raises(RemoteCallError, match="before any reply"):
        apply_layout(client, TARGET)
