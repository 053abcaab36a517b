"""Pydantic schemas for the collector API."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, model_validator


class TargetPayload(BaseModel):
    """Annotation for one image: parallel boxes and labels."""
    contentBoxes: List[List[float]] = Field(default_factory=list)
    labels: List[List[str]] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_parallel(self) -> "TargetPayload":
        if len(self.contentBoxes) != len(self.labels):
            raise ValueError(
                f"contentBoxes/labels length mismatch: "
                f"{len(self.contentBoxes)} != {len(self.labels)}"
            )
        for box in self.contentBoxes:
            if len(box) != 4:
                raise ValueError(f"bounding box must have 4 values, got {len(box)}")
            left, top, right, bottom = box
            if right < left or bottom < top:
                raise ValueError(f"inverted bounding box: {box}")
        for label in self.labels:
            if not label:
                raise ValueError("labels must be non-empty")
        return self


class DownloadRequest(BaseModel):
    """Request for POST /download."""
    pngBlob: List[int] = Field(..., min_length=1, description="PNG bytes as integers")
    jsonData: TargetPayload
    fileName: str = Field(..., min_length=1, description="Device / dataset name")

    @model_validator(mode="after")
    def check_bytes(self) -> "DownloadRequest":
        if any(b < 0 or b > 255 for b in self.pngBlob):
            raise ValueError("pngBlob values must be in 0..255")
        return self


class DownloadResponse(BaseModel):
    status: str = "OK"
    fileName: str
    index: int
