"""Named layout presets stored as a single JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .errors import PresetStoreError
from .models import ActionKind, Grid, Icon, Row

LOG = logging.getLogger("iconbar.presets")

STORE_VERSION = 1


# ---------------------------------------------------------------------------
# Grid <-> JSON payloads
# ---------------------------------------------------------------------------


def icon_to_dict(icon: Icon) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"icon": icon.icon, "kind": icon.action_kind.value}
    if icon.target is not None:
        payload["target"] = icon.target
    if icon.macro is not None:
        payload["macro"] = icon.macro
    if icon.label is not None:
        payload["label"] = icon.label
    return payload


def icon_from_dict(payload: Mapping[str, Any]) -> Icon:
    return Icon(
        icon=str(payload["icon"]),
        action_kind=ActionKind(payload["kind"]),
        target=payload.get("target"),
        macro=payload.get("macro"),
        label=payload.get("label"),
    )


def grid_to_dict(grid: Grid) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = []
    for row in grid.ordered_rows():
        cells = {str(column): icon_to_dict(row.cells[column]) for column in row.columns()}
        rows.append({"row_key": row.row_key, "cells": cells})
    return {"rows": rows}


def grid_from_dict(payload: Mapping[str, Any]) -> Grid:
    rows: Dict[int, Row] = {}
    for index, raw_row in enumerate(payload.get("rows", [])):
        cells = {int(column): icon_from_dict(raw) for column, raw in (raw_row.get("cells") or {}).items()}
        rows[index] = Row(int(raw_row["row_key"]), cells)
    return Grid(rows)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def load(store_id: str | Path) -> Dict[str, Grid]:
    """Read every preset from *store_id*; a missing file is an empty store."""

    path = Path(store_id)
    if not path.exists():
        LOG.warning("preset store %s not found; starting empty", path)
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        raw_presets = data.get("presets", {})
        return {str(name): grid_from_dict(raw) for name, raw in raw_presets.items()}
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
        raise PresetStoreError(f"cannot read preset store {path}: {exc}") from exc


def save(store_id: str | Path, presets: Mapping[str, Grid]) -> bool:
    """Write all presets to *store_id*, replacing the file atomically."""

    path = Path(store_id)
    payload = {
        "version": STORE_VERSION,
        "presets": {name: grid_to_dict(presets[name]) for name in sorted(presets)},
    }
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        tmp.replace(path)
    except OSError as exc:
        LOG.error("preset store write failed for %s: %s", path, exc)
        return False
    LOG.info("saved %d preset(s) to %s", len(presets), path)
    return True
