# metrics/contrast.py
from __future__ import annotations

from typing import Optional

import cv2
import numpy as np


def local_contrast_map(image: np.ndarray) -> np.ndarray:
    """Absolute Laplacian of the grey image, float32 (H, W)."""
    grey = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return np.abs(cv2.Laplacian(grey.astype(np.float32), cv2.CV_32F, ksize=3))


def mean_local_contrast(image: np.ndarray, mask: Optional[np.ndarray] = None) -> float:
    """
    Mean local contrast, optionally restricted to mask > 0.5.
    NaN when the mask selects nothing.
    """
    lap = local_contrast_map(image)
    if mask is None:
        return float(lap.mean())
    sel = mask > 0.5
    if not sel.any():
        return float("nan")
    return float(lap[sel].mean())


def contrast_ratio(clear: np.ndarray, anon: np.ndarray, mask: np.ndarray) -> float:
    """
    Residual detail inside mask: contrast(anon) / contrast(clear).
    ~1.0 means untouched, values near 0 mean heavily blurred.
    """
    before = mean_local_contrast(clear, mask)
    after = mean_local_contrast(anon, mask)
    if not before or before != before:
        return float("nan")
    return after / before
