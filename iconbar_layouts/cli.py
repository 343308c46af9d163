"""Command line entry-point: capture, list and re-apply icon bar presets.

Run:
  python -m iconbar_layouts.cli show
  python -m iconbar_layouts.cli save daily
  python -m iconbar_layouts.cli apply daily
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from . import presets as preset_store
from .client import IconbarClient, Transport
from .config import apply_cli_overrides, load_config_file, prepare_config
from .errors import LayoutError
from .extract import parse_grid
from .models import ActionKind, Grid, Icon, Position
from .placement import predict_position
from .preview import render_preview
from .sync import Call, apply_layout

LOG = logging.getLogger("iconbar.cli")

Prompt = Callable[[str], str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def confirm(question: str, prompt: Prompt, assume_yes: bool = False) -> bool:
    """Ask a yes/no question; anything but an explicit yes declines."""

    if assume_yes:
        return True
    try:
        answer = prompt(f"{question} [y/N] ").strip().lower()
    except EOFError:
        answer = ""
    return answer in {"y", "yes"}


def format_grid(grid: Grid) -> str:
    lines = []
    for index, row in enumerate(grid.ordered_rows()):
        lines.append(f"row {index} (key {row.row_key}): {len(row.cells)} icon(s)")
        for column in row.columns():
            icon = row.cells[column]
            parts = [f"  [{column}]", icon.icon, icon.action_kind.value]
            if icon.value:
                parts.append(icon.value)
            if icon.label:
                parts.append(f'"{icon.label}"')
            lines.append(" ".join(parts))
    return "\n".join(lines)


def _new_cell(before: Grid, after: Grid, icon: Icon) -> Optional[Position]:
    for row in after.ordered_rows():
        previous = before.row_by_key(row.row_key)
        for column in row.columns():
            if row.cells[column] != icon:
                continue
            if previous is None or previous.cells.get(column) != icon:
                return Position(column, row.row_key)
    return None


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map CLI flags to config override keys."""
    overrides: Dict[str, Any] = {}
    if args.presets:
        overrides["presets.path"] = str(args.presets)
    if args.base_url:
        overrides["remote.base_url"] = args.base_url
    if args.cookie:
        overrides["remote.cookie"] = args.cookie
    return overrides


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_show(args: argparse.Namespace, cfg: Dict[str, Any], client: IconbarClient, prompt: Prompt) -> int:
    grid = parse_grid(client.state())
    if args.json:
        print(json.dumps(preset_store.grid_to_dict(grid), indent=2))
    else:
        print(format_grid(grid))
    return 0


def _cmd_save(args: argparse.Namespace, cfg: Dict[str, Any], client: IconbarClient, prompt: Prompt) -> int:
    store_path = cfg["presets"]["path"]
    stored = preset_store.load(store_path)
    if args.name in stored and not confirm(f"Preset {args.name!r} exists. Overwrite?", prompt, args.yes):
        print("Aborted: preset left unchanged.")
        return 1

    grid = parse_grid(client.state())
    stored[args.name] = grid
    if not preset_store.save(store_path, stored):
        return 1
    print(f"Saved preset {args.name!r}: {len(grid.rows)} row(s), {grid.icon_count()} icon(s)")
    return 0


def _cmd_apply(args: argparse.Namespace, cfg: Dict[str, Any], client: IconbarClient, prompt: Prompt) -> int:
    stored = preset_store.load(cfg["presets"]["path"])
    target = stored.get(args.name)
    if target is None:
        LOG.error("no preset named %r", args.name)
        return 1

    question = f"Reset the remote icon bar and rebuild it as {args.name!r} ({target.icon_count()} icon(s))?"
    if not confirm(question, prompt, args.yes):
        print("Aborted: remote icon bar left unchanged.")
        return 1

    def progress(call: Call, current: Grid) -> None:
        LOG.info("%s done; remote now has %d icon(s)", call.operation, current.icon_count())

    final = apply_layout(client, target, progress_cb=progress)
    if final.same_layout(target):
        print(f"Applied preset {args.name!r}.")
    else:
        print(f"Applied preset {args.name!r}; the remote layout differs slightly:")
        print(format_grid(final))
    return 0


def _cmd_list(args: argparse.Namespace, cfg: Dict[str, Any], client: IconbarClient, prompt: Prompt) -> int:
    stored = preset_store.load(cfg["presets"]["path"])
    if not stored:
        print("No presets saved.")
        return 0
    for name in sorted(stored):
        grid = stored[name]
        print(f"{name}: {len(grid.rows)} row(s), {grid.icon_count()} icon(s)")
    return 0


def _cmd_remove(args: argparse.Namespace, cfg: Dict[str, Any], client: IconbarClient, prompt: Prompt) -> int:
    store_path = cfg["presets"]["path"]
    stored = preset_store.load(store_path)
    if args.name not in stored:
        LOG.error("no preset named %r", args.name)
        return 1
    del stored[args.name]
    if not preset_store.save(store_path, stored):
        return 1
    print(f"Removed preset {args.name!r}.")
    return 0


def _cmd_add(args: argparse.Namespace, cfg: Dict[str, Any], client: IconbarClient, prompt: Prompt) -> int:
    kind = ActionKind(args.kind)
    if kind.uses_target:
        icon = Icon(args.icon, kind, target=args.value, label=args.label)
    else:
        icon = Icon(args.icon, kind, macro=args.value, label=args.label)

    before = parse_grid(client.state())
    predicted = predict_position(before)
    after = parse_grid(client.create(icon))
    actual = _new_cell(before, after, icon)

    if actual is None:
        LOG.info("could not locate the new icon; predicted %s", predicted)
        print(f"Created {icon.icon!r}.")
    else:
        if actual != predicted:
            LOG.info("server placed icon at %s, predicted %s", actual, predicted)
        print(f"Created {icon.icon!r} at column {actual.column}, row {actual.row_key}.")
    return 0


def _cmd_preview(args: argparse.Namespace, cfg: Dict[str, Any], client: IconbarClient, prompt: Prompt) -> int:
    stored = preset_store.load(cfg["presets"]["path"])
    grid = stored.get(args.name)
    if grid is None:
        LOG.error("no preset named %r", args.name)
        return 1
    out = render_preview(grid, args.out, cell_size=int(cfg["preview"]["cell_size"]))
    print(f"Wrote preview: {out}")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Save and restore remote icon bar layouts")
    parser.add_argument("--config", dest="config", default="", help="Path to iconbar.yaml")
    parser.add_argument("--presets", dest="presets", type=Path, help="Preset store override")
    parser.add_argument("--base-url", dest="base_url", help="Remote base URL override")
    parser.add_argument("--cookie", dest="cookie", help="Session cookie header override")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every remote call")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print the current remote layout")
    show.add_argument("--json", action="store_true", help="Print as preset JSON")
    show.set_defaults(handler=_cmd_show)

    save = sub.add_parser("save", help="Capture the current layout as a preset")
    save.add_argument("name")
    save.add_argument("--yes", "-y", action="store_true", help="Overwrite without asking")
    save.set_defaults(handler=_cmd_save)

    apply = sub.add_parser("apply", help="Rebuild the remote layout from a preset")
    apply.add_argument("name")
    apply.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    apply.set_defaults(handler=_cmd_apply)

    listing = sub.add_parser("list", help="List saved presets")
    listing.set_defaults(handler=_cmd_list)

    remove = sub.add_parser("remove", help="Delete a saved preset")
    remove.add_argument("name")
    remove.set_defaults(handler=_cmd_remove)

    add = sub.add_parser("add", help="Create one icon where the server chooses")
    add.add_argument("icon")
    add.add_argument("kind", choices=[kind.value for kind in ActionKind])
    add.add_argument("value", nargs="?", help="Target URL (go/popup) or macro text")
    add.add_argument("--label", help="Display name")
    add.set_defaults(handler=_cmd_add)

    preview = sub.add_parser("preview", help="Render a preset to PNG")
    preview.add_argument("name")
    preview.add_argument("--out", required=True, type=Path, help="Output PNG path")
    preview.set_defaults(handler=_cmd_preview)

    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    transport: Optional[Transport] = None,
    prompt: Prompt = input,
) -> int:
    """CLI entry point used by `python -m iconbar_layouts.cli`."""

    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    cfg = load_config_file(Path(args.config) if args.config else None)
    cfg = prepare_config(apply_cli_overrides(cfg, _overrides(args)))
    if not args.verbose:
        logging.getLogger().setLevel(cfg["logging"]["level"])

    client = IconbarClient.from_config(cfg, transport=transport)
    try:
        return args.handler(args, cfg, client, prompt)
    except LayoutError as exc:
        LOG.error("%s", exc)
        return 1
    except Exception as exc:  # pragma: no cover - defensive CLI logging
        LOG.exception("unexpected failure: %s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI behavior
    sys.exit(main())
