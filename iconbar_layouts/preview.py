"""Render a Grid to a PNG contact sheet for a quick visual check."""

from __future__ import annotations

from pathlib import Path
from typing import List

from PIL import Image, ImageDraw, ImageFont

from .models import Grid, Icon

BACKGROUND = (24, 24, 28)
TILE = (44, 44, 52)
EMPTY_TILE = (32, 32, 36)
OUTLINE = (80, 80, 90)
FOREGROUND = (235, 235, 245)
MUTED = (150, 150, 165)
GUTTER = 56


def _load_font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("arial.ttf", size)
    except OSError:
        try:
            return ImageFont.truetype("DejaVuSans.ttf", size)
        except OSError:
            return ImageFont.load_default()


def _wrap(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, width: int) -> List[str]:
    wrapped: List[str] = []
    for piece in text.replace("\n", " ").split():
        if not wrapped:
            wrapped.append(piece)
        else:
            candidate = f"{wrapped[-1]} {piece}"
            if draw.textlength(candidate, font=font) <= width:
                wrapped[-1] = candidate
            else:
                wrapped.append(piece)
        if len(wrapped) == 3:
            break
    return wrapped


def _draw_tile(draw: ImageDraw.ImageDraw, icon: Icon, box: List[int], font, small_font) -> None:
    x0, y0, x1, y1 = box
    draw.rounded_rectangle(box, radius=12, fill=TILE, outline=OUTLINE, width=2)

    lines = _wrap(draw, icon.label or icon.icon, font, (x1 - x0) - 12)
    line_height = int(getattr(font, "size", 12) * 1.1)
    y_pos = y0 + ((y1 - y0) - len(lines) * line_height) // 2 - line_height // 2
    for line in lines:
        text_width = draw.textlength(line, font=font)
        draw.text((x0 + ((x1 - x0) - text_width) // 2, y_pos), line, fill=FOREGROUND, font=font)
        y_pos += line_height

    kind = icon.action_kind.value
    kind_width = draw.textlength(kind, font=small_font)
    draw.text((x0 + ((x1 - x0) - kind_width) // 2, y1 - 20), kind, fill=MUTED, font=small_font)


def render_preview(grid: Grid, path: str | Path, cell_size: int = 96) -> Path:
    """Draw each row as a strip of tiles labelled with its row key; return *path*."""

    rows = grid.ordered_rows()
    columns = max((max(row.cells) + 1 for row in rows if row.cells), default=1)
    pad = 6
    width = GUTTER + columns * (cell_size + pad) + pad
    height = max(1, len(rows)) * (cell_size + pad) + pad

    image = Image.new("RGB", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(image)
    font = _load_font(max(10, cell_size // 6))
    small_font = _load_font(max(8, cell_size // 9))

    for index, row in enumerate(rows):
        y0 = pad + index * (cell_size + pad)
        draw.text((8, y0 + cell_size // 2 - 8), f"#{row.row_key}", fill=MUTED, font=font)
        for column in range(columns):
            x0 = GUTTER + pad + column * (cell_size + pad)
            box = [x0, y0, x0 + cell_size, y0 + cell_size]
            icon = row.cells.get(column)
            if icon is None:
                draw.rounded_rectangle(box, radius=12, fill=EMPTY_TILE, outline=OUTLINE, width=1)
            else:
                _draw_tile(draw, icon, box, font, small_font)

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    image.save(out, "PNG")
    return out
