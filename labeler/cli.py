"""Command-line entry point.

    python -m labeler label <file_key> <page_id> --device iphone15 [--check]
    python -m labeler classify page.json
    python -m labeler palette page.json --classes icon badge [--palette palette.json]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config, settings
from .core.classifier import classify
from .core.nodes import Node, NodeKind, node_from_dict, page_from_dict
from .integrations.figma_client import FigmaClient, FigmaClientError
from .integrations.uploader import DatasetUploader
from .logging_config import LEVELS, get_labeler_logger
from .palette import (
    PaletteError,
    available_classes,
    find_palette_page,
    load_palette,
    sections_from_page,
)
from .pipeline import LabelingSession

logger = logging.getLogger("labeler.cli")


def _load_json(path: str) -> Dict[str, Any]:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _page_nodes(data: Dict[str, Any]) -> List[Node]:
    """Accept a page dict, a REST ``nodes`` response, or a single frame dict."""
    if "nodes" in data:
        entry = next(iter(data["nodes"].values()), None) or {}
        data = entry.get("document", {})
    if data.get("type") in ("CANVAS", NodeKind.PAGE.value) or "type" not in data:
        return page_from_dict(data)
    return [node_from_dict(data, parent_kind=NodeKind.PAGE)]


async def _label(args: argparse.Namespace) -> int:
    device = args.device or config.LABELER_DEVICE
    if not device:
        print("error: --device (or LABELER_DEVICE) is required", file=sys.stderr)
        return 2

    client = FigmaClient()
    try:
        page = await client.get_page(args.file_key, args.page_id)
        nodes = page_from_dict(page)
        async with DatasetUploader(args.collector_url) as uploader:
            session = LabelingSession(device, uploader, client.image_source(args.file_key))
            if args.check:
                overlays = session.collect(nodes, with_overlays=True)
                print(json.dumps([o.to_dict() for o in overlays], ensure_ascii=False, indent=2))
                return 0
            summary = await session.run(nodes)
    finally:
        await client.close()

    for outcome in summary.outcomes:
        if outcome.ok:
            print(f"rename: {outcome.frame_name!r} -> {outcome.new_name!r}")
    print(summary.message)
    return 0 if summary.success_count == summary.total else 1


def _classify(args: argparse.Namespace) -> int:
    nodes = _page_nodes(_load_json(args.json_file))
    out = [
        {"name": n.name, **classify(n).to_dict()}
        for n in nodes
        if n.kind is NodeKind.FRAME
    ]
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


def _palette(args: argparse.Namespace) -> int:
    nodes = _page_nodes(_load_json(args.json_file))
    existing = []
    if args.palette:
        palette = _load_json(args.palette)
        if palette.get("type") == "DOCUMENT":
            palette = find_palette_page(palette.get("children", [])) or {}
        existing = sections_from_page(palette)
    try:
        load = load_palette(
            nodes, args.classes, existing, width=args.width, height=args.height,
        )
    except PaletteError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    out = {
        "sections": [
            {"name": s.name, "x": s.x, "y": s.y, "width": s.width,
             "height": s.height, "existing": s.existing}
            for s in load.sections.values()
        ],
        "placements": [
            {"component": p.component.name, "id": p.component.id,
             "section": load.sections[p.section_key].category, "x": p.x, "y": p.y}
            for p in load.placements
        ],
        "message": load.message,
    }
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labeler",
        description="Label UI components in Figma frames and upload them as a dataset.",
    )
    parser.add_argument("--log-level", choices=LEVELS, default=None,
                        help="Console log level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--log-dir", type=Path, default=None,
                        help="Directory for labeler.log (default: LOG_DIR)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_label = sub.add_parser("label", help="Classify a Figma page and upload its frames")
    p_label.add_argument("file_key")
    p_label.add_argument("page_id")
    p_label.add_argument("--device", default=None, help="Dataset file name (device)")
    p_label.add_argument("--check", action="store_true",
                         help="Only classify and print review overlays")
    p_label.add_argument("--collector-url", default=None)

    p_classify = sub.add_parser("classify", help="Classify a local Figma JSON dump")
    p_classify.add_argument("json_file")

    p_palette = sub.add_parser("palette", help="Plan a synthetic palette load")
    p_palette.add_argument("json_file")
    p_palette.add_argument("--classes", nargs="+", default=["all"],
                           help=f"Class names or 'all' ({', '.join(available_classes())})")
    p_palette.add_argument("--palette", default=None,
                           help="JSON dump of the existing palette page")
    p_palette.add_argument("--width", type=float, default=settings.PALETTE_SECTION_WIDTH)
    p_palette.add_argument("--height", type=float, default=settings.PALETTE_SECTION_HEIGHT)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    get_labeler_logger(level=args.log_level, log_dir=args.log_dir)
    if args.command == "label":
        try:
            return asyncio.run(_label(args))
        except FigmaClientError as e:
            logger.error(f"label: {e}")
            return 1
    if args.command == "classify":
        return _classify(args)
    return _palette(args)
