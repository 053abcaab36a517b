"""Labeling session: classify the page's top-level frames and upload them.

A session owns everything one labeling run needs (device name, pending
targets, uploader, image source), so nothing lives in module globals.

Flow:
1. ``collect`` classifies every labelable frame on the page (optionally
   planning review overlays for a checking pass)
2. ``upload_all`` exports and uploads the targets one at a time; a failure
   is recorded for that frame and the batch continues
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .core.classifier import ClassificationResult, classify
from .core.nodes import Node, NodeKind
from .core.policy import DEFAULT_POLICY, ClassificationPolicy
from .integrations.figma_client import FigmaClientError, ImageSource
from .integrations.uploader import DatasetUploader, UploadError
from .overlay import TARGET_SUFFIX, TargetOverlay, plan_overlay

logger = logging.getLogger("labeler.pipeline")

COMPLETED_SUFFIX = "(completed)"


def is_labelable_frame(node: Node) -> bool:
    """Top-level FRAME that is neither an overlay nor already uploaded."""
    return (
        node.kind is NodeKind.FRAME
        and node.is_top_level
        and not node.name.endswith(TARGET_SUFFIX)
        and not node.name.endswith(COMPLETED_SUFFIX)
    )


def completed_name(name: str) -> str:
    return f"{name} {COMPLETED_SUFFIX}"


@dataclass
class LabeledTarget:
    """One classified frame waiting for upload."""
    frame: Node
    result: ClassificationResult


@dataclass
class UploadOutcome:
    frame_name: str
    ok: bool
    status: str
    new_name: Optional[str] = None  # Set on success: "<name> (completed)"


@dataclass
class BatchSummary:
    outcomes: List[UploadOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failures(self) -> List[UploadOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def message(self) -> str:
        return f"Converted {self.success_count} / {self.total} targets."


class LabelingSession:
    """State for one labeling run.

    Args:
        device: Name the collector files uploads under.
        uploader: Dataset uploader.
        image_source: Async callable returning PNG bytes for a frame.
        policy: Classification policy.
    """

    def __init__(
        self,
        device: str,
        uploader: DatasetUploader,
        image_source: ImageSource,
        policy: ClassificationPolicy = DEFAULT_POLICY,
    ):
        self.device = device
        self.uploader = uploader
        self.image_source = image_source
        self.policy = policy
        self.targets: List[LabeledTarget] = []

    def collect(
        self, page_nodes: Iterable[Node], with_overlays: bool = False,
    ) -> List[TargetOverlay]:
        """Classify each labelable frame and queue it for upload.

        Returns the planned review overlays when ``with_overlays`` is set,
        otherwise an empty list.
        """
        overlays: List[TargetOverlay] = []
        queued = {id(t.frame) for t in self.targets}
        for node in page_nodes:
            if not is_labelable_frame(node) or id(node) in queued:
                continue
            logger.info(node.name)
            result = classify(node, policy=self.policy)
            self.targets.append(LabeledTarget(frame=node, result=result))
            if with_overlays:
                overlays.append(plan_overlay(node, result))
        logger.info(f"collect: {len(self.targets)} targets queued")
        return overlays

    async def _upload_one(self, target: LabeledTarget) -> UploadOutcome:
        name = target.frame.name
        try:
            png = await self.image_source(target.frame)
            status = await self.uploader.upload(png, target.result, self.device)
        except (UploadError, FigmaClientError) as e:
            logger.warning(f"{name}| {e}")
            return UploadOutcome(frame_name=name, ok=False, status=str(e))
        except Exception as e:
            logger.warning(f"{name}| unexpected {type(e).__name__}: {e}")
            return UploadOutcome(
                frame_name=name, ok=False, status=f"{type(e).__name__}: {e}",
            )

        logger.info(f"{name}| {status}")
        return UploadOutcome(
            frame_name=name, ok=True, status=status, new_name=completed_name(name),
        )

    async def upload_all(self) -> BatchSummary:
        """Upload queued targets sequentially; one failure never stops the rest.

        The queue is drained, so a second call only uploads frames collected
        since the first.
        """
        targets, self.targets = self.targets, []
        summary = BatchSummary()
        for target in targets:
            summary.outcomes.append(await self._upload_one(target))
        logger.info(summary.message)
        return summary

    async def run(self, page_nodes: Iterable[Node]) -> BatchSummary:
        """Collect and upload in one go.

        Frames already queued by an earlier ``collect`` (e.g. a checking
        pass) are uploaded once, not twice.
        """
        self.collect(page_nodes)
        return await self.upload_all()
