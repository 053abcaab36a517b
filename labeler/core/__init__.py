"""Pure classification core: node model, policy table, tree walk."""

from .classifier import (
    EMPTY_RESULT,
    BoundingBox,
    ClassificationResult,
    box_for,
    child_offset,
    classify,
)
from .nodes import MIXED, Node, NodeKind, Paint, node_from_dict, page_from_dict
from .policy import DEFAULT_POLICY, ClassificationPolicy, Label

__all__ = [
    "BoundingBox",
    "ClassificationPolicy",
    "ClassificationResult",
    "DEFAULT_POLICY",
    "EMPTY_RESULT",
    "Label",
    "MIXED",
    "Node",
    "NodeKind",
    "Paint",
    "box_for",
    "child_offset",
    "classify",
    "node_from_dict",
    "page_from_dict",
]
