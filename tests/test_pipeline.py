"""Tests for labeler.pipeline: frame selection, batch upload, summaries."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from labeler.core.nodes import NodeKind
from labeler.integrations.figma_client import FigmaClient, FigmaClientError
from labeler.integrations.uploader import UploadError
from labeler.pipeline import (
    BatchSummary,
    LabelingSession,
    UploadOutcome,
    completed_name,
    is_labelable_frame,
)
from tests.conftest import frame, group, text


def _page():
    return [
        frame("Home", parent_kind=NodeKind.PAGE, id="1:1", children=[text(x=1, y=1)]),
        frame("Home (target)", parent_kind=NodeKind.PAGE, id="1:2"),
        frame("Login (completed)", parent_kind=NodeKind.PAGE, id="1:3"),
        group("Loose group", parent_kind=NodeKind.PAGE, children=[text()]),
        frame("Settings", parent_kind=NodeKind.PAGE, id="1:4"),
    ]


@pytest.fixture
def uploader():
    up = MagicMock()
    up.upload = AsyncMock(return_value="OK")
    return up


@pytest.fixture
def image_source():
    return AsyncMock(return_value=b"\x89PNG")


class TestFrameSelection:

    def test_labelable(self):
        names = [n.name for n in _page() if is_labelable_frame(n)]
        assert names == ["Home", "Settings"]

    def test_nested_frame_not_labelable(self):
        assert not is_labelable_frame(frame("Inner", parent_kind=NodeKind.FRAME))

    def test_completed_name(self):
        assert completed_name("Home") == "Home (completed)"


class TestCollect:

    def test_queues_targets_without_overlays(self, uploader, image_source):
        session = LabelingSession("iphone", uploader, image_source)
        overlays = session.collect(_page())
        assert overlays == []
        assert [t.frame.name for t in session.targets] == ["Home", "Settings"]
        assert session.targets[0].result.labels == (("TEXT",),)

    def test_checking_pass_plans_overlays(self, uploader, image_source):
        session = LabelingSession("iphone", uploader, image_source)
        overlays = session.collect(_page(), with_overlays=True)
        assert [o.name for o in overlays] == ["Home (target)", "Settings (target)"]

    def test_sessions_do_not_share_targets(self, uploader, image_source):
        a = LabelingSession("a", uploader, image_source)
        b = LabelingSession("b", uploader, image_source)
        a.collect(_page())
        assert b.targets == []


class TestUploadAll:

    @pytest.mark.asyncio
    async def test_all_succeed(self, uploader, image_source):
        session = LabelingSession("iphone", uploader, image_source)
        summary = await session.run(_page())

        assert summary.message == "Converted 2 / 2 targets."
        assert [o.new_name for o in summary.outcomes] == [
            "Home (completed)", "Settings (completed)",
        ]
        assert uploader.upload.await_count == 2
        png, result, device = uploader.upload.await_args_list[0].args
        assert png == b"\x89PNG"
        assert result.labels == (("TEXT",),)
        assert device == "iphone"

    @pytest.mark.asyncio
    async def test_failure_does_not_abort_batch(self, uploader, image_source):
        uploader.upload = AsyncMock(side_effect=[UploadError("500: Internal Server Error"), "OK"])
        session = LabelingSession("iphone", uploader, image_source)
        summary = await session.run(_page())

        assert summary.success_count == 1
        assert summary.total == 2
        assert summary.message == "Converted 1 / 2 targets."
        failed = summary.failures[0]
        assert failed.frame_name == "Home"
        assert failed.status == "500: Internal Server Error"
        assert failed.new_name is None

    @pytest.mark.asyncio
    async def test_export_failure_recorded(self, uploader):
        source = AsyncMock(side_effect=[FigmaClientError("no image"), b"png"])
        session = LabelingSession("iphone", uploader, source)
        summary = await session.run(_page())
        assert [o.ok for o in summary.outcomes] == [False, True]
        assert uploader.upload.await_count == 1

    @pytest.mark.asyncio
    async def test_uploads_are_sequential(self, image_source):
        calls = []

        async def _upload(png, result, device):
            calls.append(("start", len(calls)))
            calls.append(("end", len(calls)))
            return "OK"

        up = MagicMock()
        up.upload = _upload
        session = LabelingSession("iphone", up, image_source)
        await session.run(_page())
        assert [c[0] for c in calls] == ["start", "end", "start", "end"]

    @pytest.mark.asyncio
    async def test_empty_page(self, uploader, image_source):
        session = LabelingSession("iphone", uploader, image_source)
        summary = await session.run([])
        assert summary.message == "Converted 0 / 0 targets."

    @pytest.mark.asyncio
    async def test_transport_error_during_export_recorded(self, uploader):
        client = FigmaClient(token="test-token")
        rendered = MagicMock(status_code=200)
        rendered.json.return_value = {"images": {"1:4": "https://cdn.test/1-4.png"}}
        mock_http = AsyncMock()
        mock_http.get = AsyncMock(side_effect=[httpx.ReadError("reset"), rendered])

        with patch.object(client, "_get_client", AsyncMock(return_value=mock_http)), \
                patch.object(client, "download_image", AsyncMock(return_value=b"png")):
            session = LabelingSession("iphone", uploader, client.image_source("file"))
            summary = await session.run(_page())

        assert [(o.frame_name, o.ok) for o in summary.outcomes] == [
            ("Home", False), ("Settings", True),
        ]
        assert "reset" in summary.outcomes[0].status
        assert uploader.upload.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_recorded(self, uploader):
        source = AsyncMock(side_effect=[RuntimeError("disk full"), b"png"])
        session = LabelingSession("iphone", uploader, source)
        summary = await session.run(_page())
        assert summary.message == "Converted 1 / 2 targets."
        assert summary.failures[0].status == "RuntimeError: disk full"


class TestQueue:

    @pytest.mark.asyncio
    async def test_checking_pass_then_run_uploads_once(self, uploader, image_source):
        session = LabelingSession("iphone", uploader, image_source)
        page = _page()
        session.collect(page, with_overlays=True)
        summary = await session.run(page)
        assert summary.total == 2
        assert uploader.upload.await_count == 2

    @pytest.mark.asyncio
    async def test_upload_all_drains_queue(self, uploader, image_source):
        session = LabelingSession("iphone", uploader, image_source)
        session.collect(_page())
        await session.upload_all()
        assert session.targets == []

        again = await session.upload_all()
        assert again.total == 0
        assert uploader.upload.await_count == 2

    @pytest.mark.asyncio
    async def test_recollect_after_upload_queues_again(self, uploader, image_source):
        session = LabelingSession("iphone", uploader, image_source)
        page = _page()
        await session.run(page)
        session.collect(page)
        assert [t.frame.name for t in session.targets] == ["Home", "Settings"]


class TestBatchSummary:

    def test_counts(self):
        summary = BatchSummary(outcomes=[
            UploadOutcome("a", True, "OK", "a (completed)"),
            UploadOutcome("b", False, "timeout"),
        ])
        assert summary.total == 2
        assert summary.success_count == 1
        assert [o.frame_name for o in summary.failures] == ["b"]
