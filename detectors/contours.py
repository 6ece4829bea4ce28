# detectors/contours.py
"""
Ordered contour loops over the MediaPipe Face Mesh topology.

Each list walks the outline of one feature so that consecutive indices are
neighbours on the mesh; closing the loop joins the last point back to the
first. Left/right follow the subject's point of view, as MediaPipe does.
"""
from __future__ import annotations

from typing import Dict, List

import numpy as np

from .face import BoundingRegion, ContourKind, ContourSet, FaceRecord, Point2D

FACE_OVAL = [
    10, 338, 297, 332, 284, 251, 389, 356,
    454, 323, 361, 288, 397, 365, 379, 378,
    400, 377, 152, 148, 176, 149, 150, 136,
    172, 58, 132, 93, 234, 127, 162, 21,
    54, 103, 67, 109,
]

# cheekbone -> nostril wing -> mouth corner -> jaw, mirrored across the face
RIGHT_CHEEK = [116, 117, 118, 101, 36, 206, 216, 192, 213, 147, 123]
LEFT_CHEEK = [345, 346, 347, 330, 266, 426, 436, 416, 433, 376, 352]

RIGHT_EYE = [33, 7, 163, 144, 145, 153, 154, 155, 133, 173, 157, 158, 159, 160, 161, 246]
LEFT_EYE = [362, 382, 381, 380, 374, 373, 390, 249, 263, 466, 388, 387, 386, 385, 384, 398]

UPPER_LIP_TOP = [61, 185, 40, 39, 37, 0, 267, 269, 270, 409, 291]
UPPER_LIP_BOTTOM = [78, 191, 80, 81, 82, 13, 312, 311, 310, 415, 308]
LOWER_LIP_TOP = [78, 95, 88, 178, 87, 14, 317, 402, 318, 324, 308]
LOWER_LIP_BOTTOM = [61, 146, 91, 181, 84, 17, 314, 405, 321, 375, 291]

RIGHT_EYEBROW_TOP = [70, 63, 105, 66, 107]
RIGHT_EYEBROW_BOTTOM = [46, 53, 52, 65, 55]
LEFT_EYEBROW_TOP = [300, 293, 334, 296, 336]
LEFT_EYEBROW_BOTTOM = [276, 283, 282, 295, 285]

NOSE_BRIDGE = [168, 6, 197, 195, 5]
NOSE_BOTTOM = [98, 97, 2, 326, 327]

MESH_CONTOURS: Dict[ContourKind, List[int]] = {
    ContourKind.FACE: FACE_OVAL,
    ContourKind.LEFT_EYEBROW_TOP: LEFT_EYEBROW_TOP,
    ContourKind.LEFT_EYEBROW_BOTTOM: LEFT_EYEBROW_BOTTOM,
    ContourKind.RIGHT_EYEBROW_TOP: RIGHT_EYEBROW_TOP,
    ContourKind.RIGHT_EYEBROW_BOTTOM: RIGHT_EYEBROW_BOTTOM,
    ContourKind.LEFT_EYE: LEFT_EYE,
    ContourKind.RIGHT_EYE: RIGHT_EYE,
    ContourKind.UPPER_LIP_TOP: UPPER_LIP_TOP,
    ContourKind.UPPER_LIP_BOTTOM: UPPER_LIP_BOTTOM,
    ContourKind.LOWER_LIP_TOP: LOWER_LIP_TOP,
    ContourKind.LOWER_LIP_BOTTOM: LOWER_LIP_BOTTOM,
    ContourKind.NOSE_BRIDGE: NOSE_BRIDGE,
    ContourKind.NOSE_BOTTOM: NOSE_BOTTOM,
    ContourKind.LEFT_CHEEK: LEFT_CHEEK,
    ContourKind.RIGHT_CHEEK: RIGHT_CHEEK,
}


def mesh_to_contours(pts: np.ndarray) -> ContourSet:
    """
    pts: (N, 2) landmark array in pixels. Kinds whose indices fall outside
    the mesh (e.g. a reduced landmark model) are left out.
    """
    n = len(pts)
    out: ContourSet = {}
    for kind, idxs in MESH_CONTOURS.items():
        if max(idxs) >= n:
            continue
        out[kind] = [Point2D(float(pts[i, 0]), float(pts[i, 1])) for i in idxs]
    return out


def mesh_to_face(pts: np.ndarray, with_contours: bool = True) -> FaceRecord:
    x1, y1 = pts[:, 0].min(), pts[:, 1].min()
    x2, y2 = pts[:, 0].max(), pts[:, 1].max()
    bounds = BoundingRegion.from_box([x1, y1, x2, y2])
    return FaceRecord(bounds=bounds, contours=mesh_to_contours(pts) if with_contours else None)
