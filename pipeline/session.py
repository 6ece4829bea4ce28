# pipeline/session.py
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from anonymisers.blur import ContourBlurAnonymiser
from anonymisers.filters import make_blur
from anonymisers.mask import MaskBuilder
from detectors.adapter import DetectionAdapter
from detectors.face import DetectionResult
from diagnostics.events import FRAME_OVER_BUDGET, EventSink, default_sink

from .config import SessionConfig

logger = logging.getLogger(__name__)


def build_capability(config: SessionConfig):
    """Create the detection model named by config.detector."""
    if config.detector == "yolo":
        from detectors.yolo_detector import YOLOFaceDetector
        return YOLOFaceDetector(config.yolo_weights)

    from detectors.mp_mesh_detector import MediaPipeMeshDetector
    return MediaPipeMeshDetector(config.detector_config())


@dataclass
class FrameTiming:
    detect_s: float
    anonymise_s: float

    @property
    def total_s(self) -> float:
        return self.detect_s + self.anonymise_s


class FaceBlurSession:
    """
    Everything that lives for one capture session: detector, mask policy and
    the blur effect (built once here, shared by every frame).

    process_frame handles one frame at a time; frames must be fed in capture
    order from a single thread.
    """

    def __init__(self, capability, config: SessionConfig = None, sink: EventSink = None):
        self.config = config or SessionConfig()
        self.sink = sink or default_sink()
        self.capability = capability
        self.blur = make_blur(self.config.blur_radius, self.config.tile_mode)
        self.adapter = DetectionAdapter(capability, self.config.detector_config(), self.sink)
        self.anonymiser = ContourBlurAnonymiser(
            mask_builder=MaskBuilder(self.config.contour_kinds, self.config.fallback),
            blur=self.blur,
            sink=self.sink,
        )
        self.active = True
        self.frames = 0
        self.last_timing: Optional[FrameTiming] = None
        self.last_faces: DetectionResult = []
        self._busy = threading.Lock()

        logger.info(
            "session ready: detector=%s precise=%s blur=%.1f/%s fallback=%s",
            self.config.detector, self.config.precise_masking,
            self.blur.radius_x, self.blur.edge_mode.value, self.config.fallback.value,
        )

    @classmethod
    def from_config(cls, config: SessionConfig, sink: EventSink = None) -> "FaceBlurSession":
        return cls(build_capability(config), config, sink)

    def process_frame(self, frame: np.ndarray) -> np.ndarray:
        if not self.active:
            return frame

        if not self._busy.acquire(blocking=False):
            raise RuntimeError("process_frame called while another frame is in flight")
        try:
            t0 = time.perf_counter()
            faces = self.adapter.detect(frame)
            t1 = time.perf_counter()
            out = self.anonymiser.apply(frame, faces)
            t2 = time.perf_counter()
        finally:
            self._busy.release()

        self.frames += 1
        self.last_faces = faces
        self.last_timing = FrameTiming(t1 - t0, t2 - t1)

        budget = self.config.frame_budget_ms
        total_ms = self.last_timing.total_s * 1000.0
        if budget is not None and total_ms > budget:
            self.sink(FRAME_OVER_BUDGET, frame=self.frames,
                      total_ms=round(total_ms, 2), budget_ms=budget, faces=len(faces))
        return out

    def close(self):
        close = getattr(self.capability, "close", None)
        if close is not None:
            close()
