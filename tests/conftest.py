"""Shared fixtures and node builders.

Provides:
- Small constructors for Node trees (frame/group/text/rect/...)
- Collector ASGI client backed by a temporary dataset directory
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from labeler.core.nodes import Node, NodeKind, Paint


# ---------------------------------------------------------------------------
# Node builders
# ---------------------------------------------------------------------------


def make_node(
    kind: NodeKind,
    name: str = "",
    x: float = 0,
    y: float = 0,
    width: float = 10,
    height: float = 10,
    children=(),
    fills=None,
    parent_kind: Optional[NodeKind] = None,
    id: str = "",
) -> Node:
    """Build a node and re-parent its children to it."""
    kids = tuple(_reparent(c, kind) for c in children)
    return Node(
        kind=kind, name=name, x=x, y=y, width=width, height=height,
        fills=fills, children=kids, parent_kind=parent_kind, id=id,
    )


def _reparent(node: Node, parent_kind: NodeKind) -> Node:
    return Node(
        kind=node.kind, name=node.name, x=node.x, y=node.y,
        width=node.width, height=node.height, fills=node.fills,
        children=node.children, parent_kind=parent_kind, id=node.id,
    )


def frame(name="Frame", x=0, y=0, width=100, height=100, children=(), **kw) -> Node:
    return make_node(NodeKind.FRAME, name, x, y, width, height, children, **kw)


def group(name="Group", x=0, y=0, width=100, height=100, children=(), **kw) -> Node:
    return make_node(NodeKind.GROUP, name, x, y, width, height, children, **kw)


def text(name="Label", x=0, y=0, width=20, height=10, **kw) -> Node:
    return make_node(NodeKind.TEXT, name, x, y, width, height, **kw)


def rect(name="Rectangle", x=0, y=0, width=20, height=20, **kw) -> Node:
    return make_node(NodeKind.RECTANGLE, name, x, y, width, height, **kw)


def ellipse(name="Ellipse", x=0, y=0, width=20, height=20, **kw) -> Node:
    return make_node(NodeKind.ELLIPSE, name, x, y, width, height, **kw)


IMAGE_FILL = (Paint(type="IMAGE"),)
SOLID_FILL = (Paint(type="SOLID"),)


# ---------------------------------------------------------------------------
# Collector client
# ---------------------------------------------------------------------------


@pytest.fixture
def dataset_store(tmp_path):
    from collector.storage import DatasetStore

    return DatasetStore(root=str(tmp_path / "dataset"))


@pytest_asyncio.fixture
async def collector_client(dataset_store) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the collector app, storing into tmp_path."""
    from collector.main import app
    from collector.storage import get_store

    app.dependency_overrides[get_store] = lambda: dataset_store
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _log_dir(tmp_path, monkeypatch):
    """Keep log files out of the working tree."""
    import labeler.logging_config as logging_config

    monkeypatch.setattr(logging_config, "LOG_DIR", tmp_path / "logs")
