# detectors/face.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class ContourKind(str, Enum):
    """Facial landmark groups a detector may outline."""
    FACE = "FACE"
    LEFT_EYEBROW_TOP = "LEFT_EYEBROW_TOP"
    LEFT_EYEBROW_BOTTOM = "LEFT_EYEBROW_BOTTOM"
    RIGHT_EYEBROW_TOP = "RIGHT_EYEBROW_TOP"
    RIGHT_EYEBROW_BOTTOM = "RIGHT_EYEBROW_BOTTOM"
    LEFT_EYE = "LEFT_EYE"
    RIGHT_EYE = "RIGHT_EYE"
    UPPER_LIP_TOP = "UPPER_LIP_TOP"
    UPPER_LIP_BOTTOM = "UPPER_LIP_BOTTOM"
    LOWER_LIP_TOP = "LOWER_LIP_TOP"
    LOWER_LIP_BOTTOM = "LOWER_LIP_BOTTOM"
    NOSE_BRIDGE = "NOSE_BRIDGE"
    NOSE_BOTTOM = "NOSE_BOTTOM"
    LEFT_CHEEK = "LEFT_CHEEK"
    RIGHT_CHEEK = "RIGHT_CHEEK"


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float


# Insertion order of each point list is the traversal order.
ContourSet = Dict[ContourKind, List[Point2D]]


@dataclass(frozen=True)
class BoundingRegion:
    """
    Axis-aligned rectangle in frame pixel space.
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_box(cls, box: Sequence[float]) -> "BoundingRegion":
        """Build from an [x1, y1, x2, y2] box."""
        x1, y1, x2, y2 = (float(v) for v in box)
        return cls(x1, y1, x2 - x1, y2 - y1)

    def to_box(self) -> List[float]:
        return [self.x, self.y, self.x + self.width, self.y + self.height]

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass
class FaceRecord:
    """
    One detection result.

    contours is None for a coarse detection (bounding region only). A present
    ContourSet may still lack any individual kind.
    """
    bounds: BoundingRegion
    contours: Optional[ContourSet] = field(default=None)

    @property
    def is_coarse(self) -> bool:
        return self.contours is None

    def contour(self, kind: ContourKind) -> List[Point2D]:
        if not self.contours:
            return []
        return self.contours.get(kind) or []


DetectionResult = List[FaceRecord]
