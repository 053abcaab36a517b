"""Labeler runtime settings: tunable parameters for labeling and palette layout.

All values read from environment variables with sensible defaults matching
the original hardcoded values. Import from here instead of hardcoding.

Infrastructure config (collector URL, tokens, server binding) stays
in labeler/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


# =====================================================================
# HTTP Clients (uploader, Figma API)
# =====================================================================

UPLOAD_HTTP_TIMEOUT = _float("UPLOAD_HTTP_TIMEOUT", 30.0)

FIGMA_HTTP_TIMEOUT = _float("FIGMA_HTTP_TIMEOUT", 60.0)

# Export scale for frame images; boxes are in design units, so 1 keeps
# image pixels and annotation coordinates aligned
FIGMA_EXPORT_SCALE = _int("FIGMA_EXPORT_SCALE", 1)
FIGMA_EXPORT_FORMAT = _str("FIGMA_EXPORT_FORMAT", "png")


# =====================================================================
# Review overlay
# =====================================================================

LABEL_TAG_WIDTH = _float("LABEL_TAG_WIDTH", 50.0)
LABEL_TAG_HEIGHT = _float("LABEL_TAG_HEIGHT", 10.0)
LABEL_TAG_FONT_SIZE = _float("LABEL_TAG_FONT_SIZE", 6.0)
LABEL_TAG_RADIUS = _float("LABEL_TAG_RADIUS", 5.0)


# =====================================================================
# Synthetic palette
# =====================================================================

PALETTE_PAGE_NAME = _str("PALETTE_PAGE_NAME", "Synthetic Pallete")
PALETTE_SECTION_WIDTH = _float("PALETTE_SECTION_WIDTH", 1000.0)
PALETTE_SECTION_HEIGHT = _float("PALETTE_SECTION_HEIGHT", 1000.0)

# Space between sections, and sections per row
PALETTE_SECTION_GUTTER = _float("PALETTE_SECTION_GUTTER", 100.0)
PALETTE_SECTIONS_PER_ROW = _int("PALETTE_SECTIONS_PER_ROW", 6)

# Space between components packed into one section
PALETTE_ITEM_GAP = _float("PALETTE_ITEM_GAP", 20.0)
