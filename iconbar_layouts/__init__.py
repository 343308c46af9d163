"""Capture and restore remote icon bar layouts."""

from .errors import LayoutError, ParseError, PresetStoreError, RemoteCallError
from .extract import parse_grid, parse_icon, parse_row
from .models import ActionKind, Grid, Icon, Position, Row
from .placement import predict_position
from .sync import apply_layout

__all__ = [
    "ActionKind",
    "Grid",
    "Icon",
    "Position",
    "Row",
    "LayoutError",
    "ParseError",
    "PresetStoreError",
    "RemoteCallError",
    "parse_grid",
    "parse_icon",
    "parse_row",
    "predict_position",
    "apply_layout",
]
