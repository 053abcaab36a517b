"""Review overlay planning.

Builds a description of the "(target)" frame drawn next to each labeled
frame: one red box per match plus a small caption tag above it. Nothing is
drawn here; the host applies the plan to its canvas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from . import settings
from .core.classifier import BoundingBox, ClassificationResult
from .core.nodes import Node
from .core.policy import Label

TARGET_SUFFIX = "(target)"

Color = Tuple[float, float, float, float]  # r, g, b, a in 0..1

RED: Color = (1.0, 0.0, 0.0, 1.0)
WHITE: Color = (1.0, 1.0, 1.0, 1.0)
CLEAR: Color = (0.0, 0.0, 0.0, 0.0)
SHADE: Color = (0.0, 0.0, 0.0, 0.1)


def caption(label: Label) -> str:
    return " ".join(label)


@dataclass(frozen=True)
class LabelTag:
    """Caption tag anchored above a box's top-left corner."""
    text: str
    x: float
    y: float
    width: float = settings.LABEL_TAG_WIDTH
    height: float = settings.LABEL_TAG_HEIGHT
    fill: Color = RED
    text_fill: Color = WHITE
    font_size: float = settings.LABEL_TAG_FONT_SIZE
    top_radius: float = settings.LABEL_TAG_RADIUS


@dataclass(frozen=True)
class OverlayBox:
    name: str
    x: float
    y: float
    width: float
    height: float
    tag: LabelTag
    stroke: Color = RED
    fill: Color = CLEAR


@dataclass
class TargetOverlay:
    """Overlay frame for one labeled top-level frame."""
    name: str
    x: float
    y: float
    width: float
    height: float
    fill: Color = SHADE
    boxes: List[OverlayBox] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "boxes": [
                {
                    "name": b.name,
                    "x": b.x,
                    "y": b.y,
                    "width": b.width,
                    "height": b.height,
                    "tag": {"text": b.tag.text, "x": b.tag.x, "y": b.tag.y},
                }
                for b in self.boxes
            ],
        }


def overlay_box(box: BoundingBox, label: Label) -> OverlayBox:
    left, top, right, bottom = box
    text = caption(label)
    return OverlayBox(
        name=text,
        x=left,
        y=top,
        width=right - left,
        height=bottom - top,
        tag=LabelTag(text=text, x=left, y=top - settings.LABEL_TAG_HEIGHT),
    )


def plan_overlay(frame: Node, result: ClassificationResult) -> TargetOverlay:
    """Describe the review overlay for ``frame``.

    Box coordinates are taken as-is: for a page-level frame they are
    relative to the frame, which is also the overlay frame's origin.
    """
    return TargetOverlay(
        name=f"{frame.name} {TARGET_SUFFIX}",
        x=frame.x,
        y=frame.y,
        width=frame.width,
        height=frame.height,
        boxes=[overlay_box(box, label) for box, label in result.pairs()],
    )
