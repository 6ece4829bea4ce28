import logging

from diagnostics.events import DRAW_FAILED, default_sink

from .base_anon import BaseAnonymiser
from .canvas import CanvasError, FrameCanvas
from .filters import make_blur
from .mask import MaskBuilder

logger = logging.getLogger(__name__)


class ContourBlurAnonymiser(BaseAnonymiser):
    """
    Blurs each face inside its own mask and leaves the rest of the frame sharp.

    The mask is the face's traced contours when it has them, otherwise the
    ellipse inscribed in its bounding region (see MaskBuilder).
    """
    def __init__(self, mask_builder=None, blur=None, sink=None):
        self.mask_builder = mask_builder or MaskBuilder()
        self.blur = blur or make_blur()
        self.sink = sink or default_sink()

    def process(self, canvas: FrameCanvas, faces, blur=None):
        """
        Composite one frame in place on canvas.

        Every face leaves the canvas with the clip it started with, even when
        drawing fails half way; a CanvasError is reported after the restore
        and the next face is processed.
        """
        blur = blur or self.blur
        canvas.render()

        for i, face in enumerate(faces):
            region = self.mask_builder.build_mask(face)
            if region.is_empty:
                logger.debug("face %d: empty mask, skipped", i)
                continue

            try:
                with canvas.checkpoint():
                    canvas.clip_region(region, antialias=True)
                    canvas.render(blur)
            except CanvasError as e:
                self.sink(DRAW_FAILED, face_index=i, error=str(e))

    def apply(self, frame, faces):
        canvas = FrameCanvas(frame)
        self.process(canvas, faces)
        return canvas.target
