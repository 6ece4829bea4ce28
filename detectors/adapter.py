# detectors/adapter.py
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from diagnostics.events import DETECTION_FAILED, FACE_RECORD_INVALID, EventSink, default_sink

from .config import DetectorConfig
from .face import BoundingRegion, ContourKind, ContourSet, DetectionResult, FaceRecord, Point2D

logger = logging.getLogger(__name__)


def _to_point(p: Any) -> Point2D:
    if isinstance(p, Point2D):
        return p
    if isinstance(p, Mapping):
        return Point2D(float(p["x"]), float(p["y"]))
    if hasattr(p, "x") and hasattr(p, "y"):
        return Point2D(float(p.x), float(p.y))
    x, y = p[:2]
    return Point2D(float(x), float(y))


def _to_kind(key: Any) -> Optional[ContourKind]:
    if isinstance(key, ContourKind):
        return key
    try:
        return ContourKind(str(key).upper())
    except ValueError:
        return None


def normalise_contours(raw: Optional[Mapping]) -> Optional[ContourSet]:
    """
    Convert a raw {kind: points} mapping into a ContourSet.
    Unknown kinds are ignored; the order of points is kept as given.
    """
    if raw is None:
        return None
    out: ContourSet = {}
    for key, points in raw.items():
        kind = _to_kind(key)
        if kind is None:
            continue
        out[kind] = [_to_point(p) for p in (points if points is not None else [])]
    return out


def _to_bounds(raw: Mapping) -> BoundingRegion:
    if "bbox" in raw:
        return BoundingRegion.from_box(raw["bbox"])
    b = raw["bounds"]
    if isinstance(b, BoundingRegion):
        return b
    if isinstance(b, Mapping):
        return BoundingRegion(float(b["x"]), float(b["y"]),
                              float(b["width"]), float(b["height"]))
    x, y, w, h = b
    return BoundingRegion(float(x), float(y), float(w), float(h))


def normalise_face(raw: Any) -> FaceRecord:
    """Raises KeyError/TypeError/ValueError for records it cannot read."""
    if isinstance(raw, FaceRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"Unsupported face record: {type(raw)}")
    return FaceRecord(bounds=_to_bounds(raw), contours=normalise_contours(raw.get("contours")))


class DetectionAdapter:
    """
    Runs the detection capability with a fixed config and turns whatever it
    returns into a DetectionResult. A failing capability yields [] for that
    frame and a "detection_failed" event; it never raises.
    """

    def __init__(self, capability, config: DetectorConfig = None, sink: EventSink = None):
        self.capability = capability
        self.config = config or DetectorConfig()
        self.sink = sink or default_sink()

    def detect(self, frame) -> DetectionResult:
        try:
            raw = self.capability.detect(frame, self.config)
            # lazy results can still fail while being consumed
            raw = list(raw) if raw is not None else []
        except Exception as e:
            self.sink(DETECTION_FAILED, error=repr(e),
                      detector=self.capability.__class__.__name__)
            return []

        if not raw:
            return []
        return self._normalise(raw)

    def _normalise(self, raw: Iterable[Any]) -> DetectionResult:
        faces: List[FaceRecord] = []
        for i, item in enumerate(raw):
            try:
                face = normalise_face(item)
            except (KeyError, TypeError, ValueError) as e:
                self.sink(FACE_RECORD_INVALID, index=i, error=repr(e))
                continue
            if not self.config.wants_contours and face.contours is not None:
                face = FaceRecord(bounds=face.bounds, contours=None)
            faces.append(face)
        logger.debug("detected %d face(s)", len(faces))
        return faces
