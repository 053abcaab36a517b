"""Classification policy: which UI-component category a single node belongs to.

Ordered, first-match-wins:

1. High-priority names (checked before any type rule, so a rectangle named
   ``statusBar`` is STATUS_BAR rather than RECTANGLE)
2. TEXT nodes
3. Image fills (first paint only)
4. Plain rectangles / ellipses
5. General component names
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from .nodes import MIXED, Node, NodeKind

Label = Tuple[str, ...]

NameMatch = Literal["exact", "contains"]

HIGH_PRIORITY_CLASSES: Dict[str, str] = {
    "statusBar": "STATUS_BAR",
    "homeIndicator": "HOME_INDICATOR",
    "TextButton": "TEXT_BUTTON",
    "badge": "BADGE",
}

# Insertion order is the match order
GENERAL_CLASSES: Dict[str, str] = {
    "textField": "TEXT_FIELD",
    "searchField": "SEARCH_FIELD",
    "commonButton": "COMMON_BUTTON",
    "iconButton": "ICON_BUTTON",
    "icon": "ICON",
    "segmentedButton": "SEGMENTED_BUTTON",
    "switch": "SWITCH",
    "topAppBar": "TOP_APP_BAR",
    "chip": "CHIP",
    "list": "LIST",
    "row": "ROW",
    "card": "CARD",
    "carousel": "CAROUSEL",
    "grid": "GRID",
    "tabBar": "TAB_BAR",
    "tab": "TAB",
    "bottomNavigation": "BOTTOM_NAVIGATION",
    "backDrop": "BACK_DROP",
    "banner": "BANNER",
    "modal": "MODAL",
    "keyboard": "KEYBOARD",
    "tooltip": "TOOLTIP",
    "radioButton": "RADIO_BUTTON",
    "datePicker": "DATE_PICKER",
    "timePicker": "TIME_PICKER",
    "quantityPicker": "QUANTITY_PICKER",
    "other": "OTHER",
}

TEXT_LABEL = "TEXT"
IMAGE_RECTANGLE_LABEL = "IMAGE_RECTANGLE"
IMAGE_ELLIPSE_LABEL = "IMAGE_ELLIPSE"
RECTANGLE_LABEL = "RECTANGLE"
ELLIPSE_LABEL = "ELLIPSE"


def has_image_fill(node: Node) -> bool:
    """True when the node's first fill is an image. MIXED counts as no fill."""
    fills = node.fills
    if fills is None or fills is MIXED or len(fills) == 0:
        return False
    return fills[0].type == "IMAGE"


@dataclass(frozen=True)
class ClassificationPolicy:
    """Name tables plus the general-name matching mode.

    ``name_match="contains"`` reproduces the older substring behaviour for
    the general table; high-priority names are always matched exactly.
    """
    high_priority: Dict[str, str] = field(default_factory=lambda: dict(HIGH_PRIORITY_CLASSES))
    general: Dict[str, str] = field(default_factory=lambda: dict(GENERAL_CLASSES))
    name_match: NameMatch = "exact"

    def class_names(self) -> List[str]:
        """Selectable class keys, high-priority first."""
        return list(self.high_priority) + list(self.general)

    def _match_general(self, name: str) -> Optional[str]:
        upper = name.upper()
        for key, label in self.general.items():
            key_upper = key.upper()
            if self.name_match == "contains":
                if key_upper in upper:
                    return label
            elif upper == key_upper:
                return label
        return None

    def label_for(self, node: Node) -> Optional[Label]:
        """Return the node's label, or None when it is not a target."""
        upper = node.name.upper()
        for key, label in self.high_priority.items():
            if upper == key.upper():
                return (label,)

        if node.kind is NodeKind.TEXT:
            return (TEXT_LABEL,)

        if has_image_fill(node):
            if node.kind is NodeKind.ELLIPSE:
                return (IMAGE_ELLIPSE_LABEL,)
            return (IMAGE_RECTANGLE_LABEL,)

        if node.kind is NodeKind.RECTANGLE:
            return (RECTANGLE_LABEL,)
        if node.kind is NodeKind.ELLIPSE:
            return (ELLIPSE_LABEL,)

        general = self._match_general(node.name)
        if general is not None:
            return (general,)
        return None


DEFAULT_POLICY = ClassificationPolicy()
