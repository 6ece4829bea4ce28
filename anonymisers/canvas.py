# anonymisers/canvas.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from .filters import BlurEffect, apply_blur, blur_window
from .mask import MaskRegion


Box = Tuple[int, int, int, int]


class CanvasError(RuntimeError):
    pass


class FrameCanvas:
    """
    Render target for one camera frame.

    source holds the sharp frame and is never written. target is the output
    buffer; every render() draws the source (optionally filtered) into it
    through the current clip. The clip is a float coverage map, None meaning
    the whole frame. save()/restore() checkpoint the clip.
    """

    def __init__(self, frame: np.ndarray):
        if frame is None or frame.ndim not in (2, 3) or frame.size == 0:
            raise CanvasError("FrameCanvas needs a non-empty (H, W) or (H, W, C) image")
        self.source = frame
        self.target = frame.copy()
        self.draw_calls = 0
        self._clip: Optional[np.ndarray] = None
        self._stack: List[Optional[np.ndarray]] = []
        self._filtered: Dict[BlurEffect, np.ndarray] = {}
        self._windows: Dict[Tuple[BlurEffect, Box], np.ndarray] = {}

    @property
    def shape(self):
        return self.source.shape

    @property
    def clip(self) -> Optional[np.ndarray]:
        return self._clip

    @property
    def save_count(self) -> int:
        return len(self._stack)

    def save(self) -> int:
        self._stack.append(self._clip)
        return len(self._stack)

    def restore(self) -> None:
        if not self._stack:
            raise CanvasError("restore() without a matching save()")
        self._clip = self._stack.pop()

    @contextmanager
    def checkpoint(self):
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def clip_region(self, region: MaskRegion, antialias: bool = True) -> None:
        """Intersect the current clip with region."""
        try:
            cov = region.rasterize(self.shape[:2], antialias=antialias)
        except cv2.error as e:
            raise CanvasError(f"clip failed: {e}") from e
        self._clip = cov if self._clip is None else np.minimum(self._clip, cov)

    def _filtered_frame(self, effect: Optional[BlurEffect]) -> np.ndarray:
        if effect is None:
            return self.source
        cached = self._filtered.get(effect)
        if cached is None:
            try:
                cached = apply_blur(self.source, effect)
            except cv2.error as e:
                raise CanvasError(f"filter failed: {e}") from e
            self._filtered[effect] = cached
        return cached

    def _filtered_window(self, effect: Optional[BlurEffect], box: Box) -> np.ndarray:
        x1, y1, x2, y2 = box
        if effect is None:
            return self.source[y1:y2, x1:x2]
        if effect in self._filtered:
            return self._filtered[effect][y1:y2, x1:x2]
        cached = self._windows.get((effect, box))
        if cached is None:
            try:
                cached = blur_window(self.source, effect, x1, y1, x2, y2)
            except cv2.error as e:
                raise CanvasError(f"filter failed: {e}") from e
            self._windows[(effect, box)] = cached
        return cached

    def _clip_box(self) -> Optional[Box]:
        rows = np.flatnonzero(self._clip.any(axis=1))
        if rows.size == 0:
            return None
        cols = np.flatnonzero(self._clip.any(axis=0))
        return int(cols[0]), int(rows[0]), int(cols[-1]) + 1, int(rows[-1]) + 1

    def render(self, effect: Optional[BlurEffect] = None) -> None:
        """
        Draw the frame into the target, filtered by effect if given.
        Under a clip only the clip's bounding box is filtered.
        """
        if self._clip is None:
            src = self._filtered_frame(effect)
            self.draw_calls += 1
            np.copyto(self.target, src)
            return

        box = self._clip_box()
        if box is None:
            self.draw_calls += 1
            return
        src = self._filtered_window(effect, box)
        self.draw_calls += 1

        x1, y1, x2, y2 = box
        alpha = self._clip[y1:y2, x1:x2]
        if self.target.ndim == 3:
            alpha = alpha[..., None]
        dst = self.target[y1:y2, x1:x2].astype(np.float32)
        blended = dst + (src.astype(np.float32) - dst) * alpha
        self.target[y1:y2, x1:x2] = np.clip(np.rint(blended), 0, 255).astype(self.target.dtype)
