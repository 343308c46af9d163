from __future__ import annotations

from PIL import Image

from iconbar_layouts.models import ActionKind, Grid, Icon, Row
from iconbar_layouts.preview import GUTTER, render_preview


def test_preview_has_one_tile_per_column_and_row(tmp_path):
    grid = Grid(
        {
            0: Row(0, {0: Icon("home", ActionKind.GO, label="Main Map"), 2: Icon("s", ActionKind.MACRO, macro="rest")}),
            1: Row(4, {}),
        }
    )
    out = render_preview(grid, tmp_path / "preview.png", cell_size=64)

    with Image.open(out) as image:
        assert image.format == "PNG"
        assert image.size == (GUTTER + 3 * (64 + 6) + 6, 2 * (64 + 6) + 6)


def test_preview_of_empty_grid(tmp_path):
    out = render_preview(Grid(), tmp_path / "sub" / "empty.png", cell_size=48)
    assert out.exists()
