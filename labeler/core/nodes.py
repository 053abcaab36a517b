"""Read-only view of the design document tree.

The host (Figma REST API or a plugin-side JSON dump) hands us plain dicts.
``node_from_dict`` turns one into an immutable ``Node`` tree whose positions
follow the plugin convention: ``x``/``y`` are relative to the nearest
ancestor that introduces a coordinate frame (groups are transparent).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

logger = logging.getLogger("labeler.core.nodes")


class NodeKind(str, Enum):
    GROUP = "GROUP"
    FRAME = "FRAME"
    COMPONENT = "COMPONENT"
    INSTANCE = "INSTANCE"
    TEXT = "TEXT"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    LINE = "LINE"
    PAGE = "PAGE"
    SECTION = "SECTION"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Optional[str]) -> "NodeKind":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


# Kinds whose children are visited by the classifier and the crawler
CONTAINER_KINDS = frozenset({
    NodeKind.GROUP, NodeKind.FRAME, NodeKind.COMPONENT, NodeKind.INSTANCE,
})


class _Mixed:
    """Sentinel for a fill list the host reports as indeterminate."""

    _instance: Optional["_Mixed"] = None

    def __new__(cls) -> "_Mixed":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MIXED"


MIXED = _Mixed()


@dataclass(frozen=True)
class Paint:
    """A single fill paint; classification only looks at the first one's ``type``."""
    type: str


Fills = Union[Tuple[Paint, ...], _Mixed, None]


@dataclass(frozen=True)
class Node:
    """One visual element of the document tree.

    ``fills`` is ``None`` when the node has no fills property at all and
    ``MIXED`` when the host cannot report a single fill list.
    ``parent_kind`` is ``None`` for a detached node.
    """
    kind: NodeKind
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    fills: Fills = None
    children: Tuple["Node", ...] = ()
    parent_kind: Optional[NodeKind] = None
    id: str = ""

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    @property
    def is_top_level(self) -> bool:
        return self.parent_kind is NodeKind.PAGE

    def walk(self) -> Iterator["Node"]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


# =====================================================================
# Dict → Node adapter
# =====================================================================


def _parse_fills(raw: Any) -> Fills:
    if raw is None:
        return None
    if raw == "MIXED":
        return MIXED
    if not isinstance(raw, list):
        logger.warning(f"Unexpected fills value {type(raw).__name__}, treating as MIXED")
        return MIXED
    return tuple(
        Paint(type=str(p.get("type", "")))
        for p in raw
        if isinstance(p, dict)
    )


def _size_of(data: Dict[str, Any], bbox: Dict[str, Any]) -> Tuple[float, float]:
    if "width" in data and "height" in data:
        return float(data["width"]), float(data["height"])
    size = data.get("size")
    if isinstance(size, dict) and "x" in size and "y" in size:
        return float(size["x"]), float(size["y"])
    return float(bbox.get("width", 0)), float(bbox.get("height", 0))


def node_from_dict(
    data: Dict[str, Any],
    parent_kind: Optional[NodeKind] = None,
    origin: Tuple[float, float] = (0.0, 0.0),
) -> Node:
    """Build a ``Node`` tree from a Figma node dict.

    Args:
        data: Node dict with at least ``type``.
        parent_kind: Kind of the parent node (``NodeKind.PAGE`` for
            top-level nodes, ``None`` for a detached subtree).
        origin: Absolute position of the coordinate frame this node's
            ``x``/``y`` are expressed in. Only used when positions come from
            ``absoluteBoundingBox``.
    """
    kind = NodeKind.parse(data.get("type"))
    bbox = data.get("absoluteBoundingBox") or {}

    if "x" in data and "y" in data:
        x, y = float(data["x"]), float(data["y"])
        abs_x, abs_y = origin[0] + x, origin[1] + y
    elif bbox:
        abs_x, abs_y = float(bbox.get("x", 0)), float(bbox.get("y", 0))
        x, y = abs_x - origin[0], abs_y - origin[1]
    else:
        x = y = 0.0
        abs_x, abs_y = origin

    width, height = _size_of(data, bbox)

    # Groups keep the parent's frame; everything else that owns children
    # becomes the origin for them.
    child_origin = origin if kind is NodeKind.GROUP else (abs_x, abs_y)

    children: List[Node] = []
    for child in data.get("children") or []:
        if not child.get("visible", True):
            continue
        children.append(node_from_dict(child, parent_kind=kind, origin=child_origin))

    return Node(
        kind=kind,
        name=str(data.get("name", "")),
        x=x,
        y=y,
        width=width,
        height=height,
        fills=_parse_fills(data.get("fills")),
        children=tuple(children),
        parent_kind=parent_kind,
        id=str(data.get("id", "")),
    )


def page_from_dict(page: Dict[str, Any]) -> List[Node]:
    """Return the top-level nodes of a page dict, each parented to the page."""
    nodes = [
        node_from_dict(child, parent_kind=NodeKind.PAGE)
        for child in page.get("children") or []
        if child.get("visible", True)
    ]
    logger.info(f"page_from_dict: page={page.get('name', '')!r}, top_level={len(nodes)}")
    return nodes
