"""Node classification and bounding-box extraction.

``classify`` walks a node tree depth-first, pre-order, and returns the
labels and global bounding boxes of every matched node. It is pure: no I/O,
no shared state, safe to call from any thread or task.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .nodes import CONTAINER_KINDS, Node, NodeKind
from .policy import DEFAULT_POLICY, ClassificationPolicy, Label

BoundingBox = Tuple[float, float, float, float]  # left, top, right, bottom


@dataclass(frozen=True)
class ClassificationResult:
    """Parallel boxes/labels for one classified subtree, in pre-order."""
    content_boxes: Tuple[BoundingBox, ...] = ()
    labels: Tuple[Label, ...] = ()

    def __post_init__(self) -> None:
        if len(self.content_boxes) != len(self.labels):
            raise ValueError(
                f"content_boxes/labels length mismatch: "
                f"{len(self.content_boxes)} != {len(self.labels)}"
            )

    def __len__(self) -> int:
        return len(self.labels)

    def pairs(self) -> List[Tuple[BoundingBox, Label]]:
        return list(zip(self.content_boxes, self.labels))

    def to_dict(self) -> Dict[str, Any]:
        """Wire format: ``{"contentBoxes": [[l,t,r,b], ...], "labels": [[tok], ...]}``."""
        return {
            "contentBoxes": [list(box) for box in self.content_boxes],
            "labels": [list(label) for label in self.labels],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassificationResult":
        return cls(
            content_boxes=tuple(tuple(box) for box in data.get("contentBoxes", [])),
            labels=tuple(tuple(label) for label in data.get("labels", [])),
        )


EMPTY_RESULT = ClassificationResult()


def child_offset(node: Node, offset_x: float, offset_y: float) -> Tuple[float, float]:
    """Offset to hand to ``node``'s children.

    Groups are transparent. Frames, components and instances fold their own
    position in, unless they sit directly on the page (or are detached), in
    which case their children are already relative to them and start at 0.
    """
    if node.kind is NodeKind.GROUP:
        return offset_x, offset_y
    if node.parent_kind is not None and node.parent_kind is not NodeKind.PAGE:
        return offset_x + node.x, offset_y + node.y
    return 0.0, 0.0


def box_for(node: Node, offset_x: float, offset_y: float) -> BoundingBox:
    left = offset_x + node.x
    top = offset_y + node.y
    return (left, top, left + node.width, top + node.height)


def classify(
    node: Node,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    policy: ClassificationPolicy = DEFAULT_POLICY,
) -> ClassificationResult:
    """Return labels and bounding boxes for ``node`` and its descendants.

    Args:
        node: Subtree root.
        offset_x, offset_y: Global position of the coordinate frame
            ``node.x``/``node.y`` are expressed in. Zero for a top-level call.
        policy: Name tables and matching mode.
    """
    boxes: List[BoundingBox] = []
    labels: List[Label] = []
    _collect(node, offset_x, offset_y, policy, boxes, labels)
    if not labels:
        return EMPTY_RESULT
    return ClassificationResult(content_boxes=tuple(boxes), labels=tuple(labels))


def _collect(
    node: Node,
    offset_x: float,
    offset_y: float,
    policy: ClassificationPolicy,
    boxes: List[BoundingBox],
    labels: List[Label],
) -> None:
    # Zero-size nodes and everything under them are skipped
    if node.width == 0 or node.height == 0:
        return

    label = policy.label_for(node)
    if label is not None:
        boxes.append(box_for(node, offset_x, offset_y))
        labels.append(label)

    if node.kind not in CONTAINER_KINDS:
        return

    next_x, next_y = child_offset(node, offset_x, offset_y)
    for child in node.children:
        _collect(child, next_x, next_y, policy, boxes, labels)
