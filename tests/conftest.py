import math

import numpy as np
import pytest

from detectors.base_detector import BaseDetector
from detectors.face import BoundingRegion, ContourKind, FaceRecord, Point2D
from diagnostics.events import RecordingEventSink

FRAME_H, FRAME_W = 240, 320


class FakeDetector(BaseDetector):
    """Returns the same faces for every frame and records its calls."""

    def __init__(self, faces=None):
        self.faces = faces if faces is not None else []
        self.calls = []
        self.closed = False

    def detect(self, frame, config):
        self.calls.append(config)
        return list(self.faces)

    def close(self):
        self.closed = True


class FailingDetector(BaseDetector):
    def detect(self, frame, config):
        raise RuntimeError("model exploded")


def circle_points(cx, cy, r, n=20):
    return [
        Point2D(cx + r * math.cos(2 * math.pi * i / n), cy + r * math.sin(2 * math.pi * i / n))
        for i in range(n)
    ]


def contour_face(cx, cy, r, n=20, cheeks=True):
    contours = {ContourKind.FACE: circle_points(cx, cy, r, n)}
    if cheeks:
        contours[ContourKind.LEFT_CHEEK] = circle_points(cx + r / 2, cy + r / 4, r / 4, 8)
        contours[ContourKind.RIGHT_CHEEK] = circle_points(cx - r / 2, cy + r / 4, r / 4, 8)
    bounds = BoundingRegion(cx - r, cy - r, 2 * r, 2 * r)
    return FaceRecord(bounds=bounds, contours=contours)


@pytest.fixture
def frame():
    """Random texture: high local contrast everywhere."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(FRAME_H, FRAME_W, 3), dtype=np.uint8)


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def fake_detector():
    return FakeDetector()
