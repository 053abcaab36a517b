"""Synthetic palette planning.

Collects already-labeled components (by layer name) from uploaded frames and
plans where each clone goes in a per-category section of the palette page.

Each section carries its packing cursor in its own name, e.g.
``"icon from labeled data 120,0,48"`` (next x, next y, lowest edge of the
current row), so a later run picks up where the previous one stopped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from . import settings
from .core.nodes import Node, NodeKind
from .core.policy import DEFAULT_POLICY, ClassificationPolicy
from .pipeline import COMPLETED_SUFFIX

logger = logging.getLogger("labeler.palette")

SECTION_MARKER = "from labeled data"
ALL_CLASSES = "all"
REVIEWED_PREFIX = "✅"


class PaletteError(Exception):
    """Raised when a component's category has no palette section."""


def available_classes(policy: ClassificationPolicy = DEFAULT_POLICY) -> List[str]:
    return policy.class_names()


def is_crawlable_frame(node: Node) -> bool:
    """Uploaded top-level frame not yet marked as reviewed."""
    return (
        node.kind is NodeKind.FRAME
        and node.name.endswith(COMPLETED_SUFFIX)
        and not node.name.startswith(REVIEWED_PREFIX)
    )


def crawl_components(node: Node, selected: Sequence[str]) -> List[Node]:
    """Pre-order list of nodes whose name matches a selected class (case-insensitive)."""
    wanted = {s.upper() for s in selected}
    found: List[Node] = []
    _crawl(node, wanted, found)
    return found


def _crawl(node: Node, wanted: set, found: List[Node]) -> None:
    if node.name.upper() in wanted:
        found.append(node)
    if node.is_container:
        for child in node.children:
            _crawl(child, wanted, found)


def _fmt(value: float) -> str:
    return f"{value:g}"


@dataclass
class PaletteSection:
    """One category section of the palette page."""
    category: str
    x: float
    y: float
    width: float
    height: float
    cursor_x: float = 0.0
    cursor_y: float = 0.0
    row_bottom: float = 0.0
    existing: bool = False

    @property
    def name(self) -> str:
        return (
            f"{self.category} {SECTION_MARKER} "
            f"{_fmt(self.cursor_x)},{_fmt(self.cursor_y)},{_fmt(self.row_bottom)}"
        )

    @classmethod
    def parse(
        cls, name: str, x: float, y: float, width: float, height: float,
    ) -> "PaletteSection":
        """Rebuild a section (and its cursor) from an existing section's name."""
        category = name.split(f" {SECTION_MARKER}")[0]
        tail = name.rpartition(" ")[2]
        try:
            cx, cy, bottom = (float(v) for v in tail.split(","))
        except ValueError:
            logger.warning(f"Section {name!r} has no cursor, starting at 0,0,0")
            cx = cy = bottom = 0.0
        return cls(
            category=category, x=x, y=y, width=width, height=height,
            cursor_x=cx, cursor_y=cy, row_bottom=bottom, existing=True,
        )

    def place(self, width: float, height: float) -> Tuple[float, float]:
        """Return the position for a ``width`` × ``height`` item and advance the cursor."""
        px, py = self.cursor_x, self.cursor_y
        self.row_bottom = max(self.row_bottom, py + height)
        self.cursor_x = px + width + settings.PALETTE_ITEM_GAP
        if self.cursor_x > self.width:
            self.cursor_x = 0.0
            self.cursor_y = self.row_bottom + settings.PALETTE_ITEM_GAP
        return px, py


def plan_sections(
    selected: Sequence[str],
    existing: Iterable[PaletteSection] = (),
    width: float = settings.PALETTE_SECTION_WIDTH,
    height: float = settings.PALETTE_SECTION_HEIGHT,
) -> Dict[str, PaletteSection]:
    """Map each selected class (uppercased) to a section, reusing existing ones.

    New sections are laid out in a grid, ``PALETTE_SECTIONS_PER_ROW`` per
    row, separated by ``PALETTE_SECTION_GUTTER``.
    """
    existing = list(existing)
    sections: Dict[str, PaletteSection] = {}
    slot = 0
    per_row = settings.PALETTE_SECTIONS_PER_ROW
    gutter = settings.PALETTE_SECTION_GUTTER

    for cls_name in selected:
        key = cls_name.upper()
        prefix = f"{cls_name} {SECTION_MARKER}"
        match = next((s for s in existing if s.name.startswith(prefix)), None)
        if match is not None:
            sections[key] = match
            continue

        sections[key] = PaletteSection(
            category=cls_name,
            x=(slot % per_row) * (width + gutter),
            y=(slot // per_row) * (height + gutter),
            width=width,
            height=height,
        )
        slot += 1

    return sections


@dataclass(frozen=True)
class Placement:
    component: Node
    section_key: str
    x: float
    y: float


@dataclass
class PaletteLoad:
    sections: Dict[str, PaletteSection]
    placements: List[Placement] = field(default_factory=list)
    crawled_frames: List[Node] = field(default_factory=list)
    total: int = 0

    @property
    def message(self) -> str:
        return f"Crawled {len(self.placements)} / {self.total} components."


def validate_destinations(
    components: Iterable[Node], sections: Dict[str, PaletteSection],
) -> None:
    missing = sorted({c.name.upper() for c in components} - set(sections))
    if missing:
        raise PaletteError(f"no destination for category {', '.join(missing)}")


def load_palette(
    page_nodes: Iterable[Node],
    selected: Sequence[str],
    existing_sections: Iterable[PaletteSection] = (),
    width: float = settings.PALETTE_SECTION_WIDTH,
    height: float = settings.PALETTE_SECTION_HEIGHT,
    policy: ClassificationPolicy = DEFAULT_POLICY,
) -> PaletteLoad:
    """Plan the palette load for every crawlable frame on the page.

    ``selected == ["all"]`` expands to every class the policy knows.
    All destinations are checked before anything is placed.
    """
    if selected and selected[0] == ALL_CLASSES:
        selected = policy.class_names()

    components: List[Node] = []
    frames: List[Node] = []
    for node in page_nodes:
        if not is_crawlable_frame(node):
            continue
        logger.info(node.name)
        components.extend(crawl_components(node, selected))
        frames.append(node)

    sections = plan_sections(selected, existing_sections, width, height)
    validate_destinations(components, sections)

    load = PaletteLoad(sections=sections, crawled_frames=frames, total=len(components))
    for comp in components:
        key = comp.name.upper()
        section = sections[key]
        x, y = section.place(comp.width, comp.height)
        load.placements.append(Placement(component=comp, section_key=key, x=x, y=y))
        logger.info(f"{key} is loaded to {section.name}")

    logger.info(load.message)
    return load


def find_palette_page(pages: Iterable[Dict], name: Optional[str] = None) -> Optional[Dict]:
    """Return the palette page dict among the document's pages, if present."""
    name = name or settings.PALETTE_PAGE_NAME
    return next((p for p in pages if p.get("name") == name), None)


def sections_from_page(page: Dict) -> List[PaletteSection]:
    """Existing palette sections on a page dict (REST or plugin dump)."""
    sections = []
    for child in page.get("children") or []:
        if child.get("type") != NodeKind.SECTION.value:
            continue
        name = child.get("name", "")
        if SECTION_MARKER not in name:
            continue
        bbox = child.get("absoluteBoundingBox") or {}
        sections.append(PaletteSection.parse(
            name,
            x=float(child.get("x", bbox.get("x", 0))),
            y=float(child.get("y", bbox.get("y", 0))),
            width=float(child.get("width", bbox.get("width", 0))),
            height=float(child.get("height", bbox.get("height", 0))),
        ))
    return sections
