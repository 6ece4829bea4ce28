# anonymisers/mask.py
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from detectors.face import BoundingRegion, ContourKind, FaceRecord, Point2D

DEFAULT_CONTOUR_KINDS: Tuple[ContourKind, ...] = (
    ContourKind.FACE,
    ContourKind.LEFT_CHEEK,
    ContourKind.RIGHT_CHEEK,
)

# fillPoly works on fixed-point coordinates: 4 fractional bits = 1/16 px
SUBPIXEL_SHIFT = 4
_SCALE = float(1 << SUBPIXEL_SHIFT)


class FallbackPolicy(str, Enum):
    """What to mask for a face that came without contours."""
    ELLIPSE = "ellipse"
    DROP = "drop"


@dataclass(frozen=True)
class Oval:
    cx: float
    cy: float
    rx: float
    ry: float

    def polygon(self) -> np.ndarray:
        # about one vertex per 2 px of perimeter, at least 32
        perimeter = 2.0 * math.pi * math.sqrt((self.rx ** 2 + self.ry ** 2) / 2.0)
        n = max(32, int(perimeter / 2.0))
        t = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False)
        return np.stack([self.cx + self.rx * np.cos(t), self.cy + self.ry * np.sin(t)], axis=1)


def _has_extent(pts: np.ndarray) -> bool:
    """
    True when the points do not all lie on one line. Signed area is not
    used: a self-crossing outline such as a figure eight has zero net area
    but still encloses pixels.
    """
    if len(pts) < 3:
        return False
    return bool(np.linalg.matrix_rank(pts - pts[0]) == 2)


class MaskRegion:
    """
    Closed region built from independent sub-paths (each closed polygon or
    oval). The region is their union: each piece is filled on its own, so
    overlaps never cancel out.
    """

    def __init__(self):
        self._subpaths: List[List[Tuple[float, float]]] = []
        self._ovals: List[Oval] = []
        self._open = False

    # -- path construction --
    def move_to(self, x: float, y: float) -> "MaskRegion":
        self._subpaths.append([(float(x), float(y))])
        self._open = True
        return self

    def line_to(self, x: float, y: float) -> "MaskRegion":
        if not self._open:
            self.move_to(x, y)
        else:
            self._subpaths[-1].append((float(x), float(y)))
        return self

    def close(self) -> "MaskRegion":
        self._open = False
        return self

    def add_oval(self, rect: BoundingRegion) -> "MaskRegion":
        if not rect.is_degenerate:
            cx, cy = rect.center
            self._ovals.append(Oval(cx, cy, rect.width / 2.0, rect.height / 2.0))
        return self

    def add_contour(self, points: Sequence[Point2D]) -> "MaskRegion":
        if not points:
            return self
        first = points[0]
        self.move_to(first.x, first.y)
        for p in points[1:]:
            self.line_to(p.x, p.y)
        return self.close()

    # -- queries --
    @property
    def subpaths(self) -> List[np.ndarray]:
        return [np.array(sp, dtype=np.float64) for sp in self._subpaths]

    @property
    def ovals(self) -> List[Oval]:
        return list(self._ovals)

    def _filled_polygons(self) -> List[np.ndarray]:
        polys = [sp for sp in self.subpaths if _has_extent(sp)]
        polys.extend(o.polygon() for o in self._ovals if o.rx > 0 and o.ry > 0)
        return polys

    @property
    def is_empty(self) -> bool:
        return not self._filled_polygons()

    def bounds(self) -> Optional[BoundingRegion]:
        polys = [sp for sp in self.subpaths if _has_extent(sp)]
        boxes = [(p[:, 0].min(), p[:, 1].min(), p[:, 0].max(), p[:, 1].max()) for p in polys]
        boxes.extend((o.cx - o.rx, o.cy - o.ry, o.cx + o.rx, o.cy + o.ry)
                     for o in self._ovals if o.rx > 0 and o.ry > 0)
        if not boxes:
            return None
        arr = np.array(boxes, dtype=np.float64)
        return BoundingRegion.from_box([arr[:, 0].min(), arr[:, 1].min(),
                                        arr[:, 2].max(), arr[:, 3].max()])

    def rasterize(self, shape: Sequence[int], antialias: bool = True) -> np.ndarray:
        """
        Coverage of the region on an (H, W) grid as float32 in [0, 1].

        fillPoly fills each sub-path by crossing parity. For simple outlines
        and figure eights that is the same as non-zero winding; contours with
        doubly wound areas are not expected from the detectors.
        """
        h, w = int(shape[0]), int(shape[1])
        cov = np.zeros((h, w), dtype=np.uint8)
        line_type = cv2.LINE_AA if antialias else cv2.LINE_8
        for poly in self._filled_polygons():
            fixed = np.round(poly * _SCALE).astype(np.int32).reshape(-1, 1, 2)
            cv2.fillPoly(cov, [fixed], 255, lineType=line_type, shift=SUBPIXEL_SHIFT)
        return cov.astype(np.float32) / 255.0

    def __repr__(self):
        return f"MaskRegion(subpaths={len(self._subpaths)}, ovals={len(self._ovals)})"


class MaskBuilder:
    """
    FaceRecord -> MaskRegion.

    contour_kinds: kinds traced, in order, when the face has contours.
    None traces every kind the record carries. fallback decides what a face
    without contours gets.
    """

    def __init__(
        self,
        contour_kinds: Optional[Iterable[ContourKind]] = DEFAULT_CONTOUR_KINDS,
        fallback: FallbackPolicy = FallbackPolicy.ELLIPSE,
    ):
        self.contour_kinds = tuple(contour_kinds) if contour_kinds is not None else None
        self.fallback = FallbackPolicy(fallback)

    def build_mask(self, face: FaceRecord) -> MaskRegion:
        region = MaskRegion()

        if face.contours is not None:
            kinds = self.contour_kinds
            if kinds is None:
                kinds = [k for k in ContourKind if k in face.contours]
            for kind in kinds:
                region.add_contour(face.contour(kind))
            return region

        if self.fallback is FallbackPolicy.ELLIPSE:
            region.add_oval(face.bounds)
        return region


def build_mask(face: FaceRecord, **kwargs) -> MaskRegion:
    return MaskBuilder(**kwargs).build_mask(face)
