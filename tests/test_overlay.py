"""Tests for labeler.overlay: review overlay geometry."""

from __future__ import annotations

from labeler.core.classifier import ClassificationResult, classify
from labeler.core.nodes import NodeKind
from labeler.overlay import CLEAR, RED, SHADE, caption, plan_overlay
from tests.conftest import frame, rect, text


class TestPlanOverlay:

    def test_frame_copied_with_target_suffix(self):
        screen = frame("Home", x=400, y=0, width=390, height=844,
                       parent_kind=NodeKind.PAGE)
        overlay = plan_overlay(screen, classify(screen))
        assert overlay.name == "Home (target)"
        assert (overlay.x, overlay.y, overlay.width, overlay.height) == (400, 0, 390, 844)
        assert overlay.fill == SHADE
        assert overlay.boxes == []

    def test_box_and_tag_geometry(self):
        screen = frame("Home", parent_kind=NodeKind.PAGE, children=[
            text("Title", x=16, y=60, width=120, height=24),
        ])
        overlay = plan_overlay(screen, classify(screen))
        (box,) = overlay.boxes
        assert (box.x, box.y, box.width, box.height) == (16, 60, 120, 24)
        assert box.name == "TEXT"
        assert box.stroke == RED and box.fill == CLEAR
        assert (box.tag.x, box.tag.y) == (16, 50)
        assert (box.tag.width, box.tag.height) == (50, 10)
        assert box.tag.text == "TEXT"

    def test_one_box_per_pair_in_order(self):
        screen = frame("Home", parent_kind=NodeKind.PAGE, children=[
            rect("badge", x=1, y=1), text(x=2, y=2),
        ])
        overlay = plan_overlay(screen, classify(screen))
        assert [b.name for b in overlay.boxes] == ["BADGE", "TEXT"]

    def test_composite_label_caption(self):
        assert caption(("ICON", "BUTTON")) == "ICON BUTTON"
        result = ClassificationResult(
            content_boxes=((0, 0, 10, 10),), labels=(("ICON", "BUTTON"),),
        )
        overlay = plan_overlay(frame("x"), result)
        assert overlay.boxes[0].tag.text == "ICON BUTTON"

    def test_to_dict(self):
        screen = frame("Home", parent_kind=NodeKind.PAGE, children=[text(x=5, y=15)])
        data = plan_overlay(screen, classify(screen)).to_dict()
        assert data["name"] == "Home (target)"
        assert data["boxes"][0]["tag"] == {"text": "TEXT", "x": 5, "y": 5}
