# anonymisers/filters.py
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional, Tuple

import cv2
import numpy as np

DEFAULT_BLUR_RADIUS = 25.0
# sigmas of at least twice this are blurred at 1/(sigma // this) scale
DOWNSAMPLE_SIGMA = 8.0


class TileMode(str, Enum):
    """How the blur samples pixels beyond the frame edge."""
    REPEAT = "repeat"
    CLAMP = "clamp"
    DECAL = "decal"
    MIRROR = "mirror"


BORDER_TYPES = {
    TileMode.REPEAT: cv2.BORDER_WRAP,
    TileMode.CLAMP: cv2.BORDER_REPLICATE,
    TileMode.DECAL: cv2.BORDER_CONSTANT,
    TileMode.MIRROR: cv2.BORDER_REFLECT_101,
}


@dataclass(frozen=True)
class BlurEffect:
    radius_x: float
    radius_y: float
    edge_mode: TileMode = TileMode.REPEAT

    @property
    def is_identity(self) -> bool:
        return self.radius_x <= 0 and self.radius_y <= 0


@lru_cache(maxsize=16)
def make_blur(
    radius: float = DEFAULT_BLUR_RADIUS,
    tile_mode: TileMode = TileMode.REPEAT,
    radius_y: Optional[float] = None,
) -> BlurEffect:
    """
    Blur description shared by every frame of a session.

    The radius is the Gaussian sigma in frame pixels. Equal arguments return
    the same instance.
    """
    ry = radius if radius_y is None else radius_y
    if radius < 0 or ry < 0:
        raise ValueError(f"Blur radius must be >= 0, got ({radius}, {ry})")
    return BlurEffect(float(radius), float(ry), TileMode(tile_mode))


def kernel_size(sigma: float) -> int:
    """Odd kernel width covering +/- 3 sigma."""
    if sigma <= 0:
        return 1
    return 2 * int(math.ceil(3.0 * sigma)) + 1


def _kernel_sizes(effect: BlurEffect) -> Tuple[int, int]:
    return kernel_size(effect.radius_x), kernel_size(effect.radius_y)


def _sample_indices(start: int, stop: int, n: int, mode: TileMode) -> Tuple[np.ndarray, np.ndarray]:
    """
    Source indices for positions start..stop-1 along an axis of length n,
    folded back into the frame the way the edge mode samples. The second
    array flags positions that fall inside the frame.
    """
    idx = np.arange(start, stop)
    inside = (idx >= 0) & (idx < n)
    if mode is TileMode.REPEAT:
        return idx % n, inside
    if mode is TileMode.MIRROR and n > 1:
        period = 2 * (n - 1)
        m = np.abs(idx) % period
        return np.where(m >= n, period - m, m), inside
    return np.clip(idx, 0, n - 1), inside


def _downsample_factor(effect: BlurEffect) -> int:
    f = int(min(effect.radius_x, effect.radius_y) // DOWNSAMPLE_SIGMA)
    return f if f >= 2 else 1


def blur_window(image: np.ndarray, effect: BlurEffect,
                x1: int, y1: int, x2: int, y2: int) -> np.ndarray:
    """
    Blurred pixels of image[y1:y2, x1:x2], as if the whole image had been
    blurred with the effect's edge mode.

    Only the window widened by half a kernel is read. Positions outside the
    frame are sampled through the edge mode (zero for DECAL). Large sigmas
    are blurred at a reduced resolution and scaled back up.
    """
    if effect.is_identity:
        return image[y1:y2, x1:x2].copy()

    kx, ky = _kernel_sizes(effect)
    px, py = kx // 2, ky // 2
    h, w = image.shape[:2]
    rows, rows_in = _sample_indices(y1 - py, y2 + py, h, effect.edge_mode)
    cols, cols_in = _sample_indices(x1 - px, x2 + px, w, effect.edge_mode)

    padded = image[np.ix_(rows, cols)]
    if effect.edge_mode is TileMode.DECAL:
        padded[~rows_in] = 0
        padded[:, ~cols_in] = 0

    f = _downsample_factor(effect)
    if f > 1:
        ph, pw = padded.shape[:2]
        small = cv2.resize(padded, (-(-pw // f), -(-ph // f)), interpolation=cv2.INTER_AREA)
        small = _gaussian(small, effect.radius_x / f, effect.radius_y / f)
        blurred = cv2.resize(small, (pw, ph), interpolation=cv2.INTER_LINEAR)
    else:
        blurred = _gaussian(padded, effect.radius_x, effect.radius_y)

    return blurred[py:py + (y2 - y1), px:px + (x2 - x1)]


def _gaussian(image: np.ndarray, sx: float, sy: float) -> np.ndarray:
    ksize = (kernel_size(sx), kernel_size(sy))
    # sigma 0 would make OpenCV derive it from the kernel size
    return cv2.GaussianBlur(image, ksize, sigmaX=max(sx, 1e-6), sigmaY=max(sy, 1e-6),
                            borderType=cv2.BORDER_REPLICATE)


def apply_blur(image: np.ndarray, effect: BlurEffect) -> np.ndarray:
    """Gaussian blur of the whole image with the effect's edge mode."""
    h, w = image.shape[:2]
    return blur_window(image, effect, 0, 0, w, h)
