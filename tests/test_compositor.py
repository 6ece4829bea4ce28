import numpy as np
import pytest

from anonymisers.blur import ContourBlurAnonymiser
from anonymisers.canvas import CanvasError, FrameCanvas
from anonymisers.filters import make_blur
from anonymisers.mask import FallbackPolicy, MaskBuilder
from detectors.face import BoundingRegion, FaceRecord
from diagnostics.events import DRAW_FAILED
from metrics.contrast import mean_local_contrast

from conftest import contour_face


class SpyCanvas(FrameCanvas):
    def __init__(self, frame):
        super().__init__(frame)
        self.saves = 0
        self.restores = 0
        self.clips = 0

    def save(self):
        self.saves += 1
        return super().save()

    def restore(self):
        self.restores += 1
        super().restore()

    def clip_region(self, region, antialias=True):
        self.clips += 1
        super().clip_region(region, antialias)


class FlakyCanvas(SpyCanvas):
    """Fails the first filtered draw."""

    def __init__(self, frame):
        super().__init__(frame)
        self.failed = False

    def render(self, effect=None):
        if effect is not None and not self.failed:
            self.failed = True
            raise CanvasError("gpu lost")
        super().render(effect)


@pytest.fixture
def anonymiser(sink):
    return ContourBlurAnonymiser(blur=make_blur(6), sink=sink)


def _disc(shape, cx, cy, r):
    yy, xx = np.mgrid[:shape[0], :shape[1]]
    return ((xx - cx) ** 2 + (yy - cy) ** 2 <= r * r).astype(np.float32)


def test_no_faces_returns_sharp_frame(frame, anonymiser):
    out = anonymiser.apply(frame, [])
    assert np.array_equal(out, frame)
    assert out is not frame


def test_contour_face_blurred_inside_sharp_outside(frame, anonymiser):
    face = contour_face(160, 120, 50, n=20)
    out = anonymiser.apply(frame, [face])

    inner = _disc(frame.shape, 160, 120, 40)
    assert mean_local_contrast(out, inner) < 0.3 * mean_local_contrast(frame, inner)

    outside = 1.0 - _disc(frame.shape, 160, 120, 53)
    sel = outside > 0.5
    assert np.array_equal(out[sel], frame[sel])


def test_coarse_face_blurs_inscribed_ellipse(frame, anonymiser):
    face = FaceRecord(bounds=BoundingRegion(100, 100, 50, 80), contours=None)
    out = anonymiser.apply(frame, [face])

    for x, y in [(100, 100), (149, 100), (100, 179), (149, 179)]:
        assert np.array_equal(out[y, x], frame[y, x])

    centre = (slice(135, 146), slice(120, 131))
    assert not np.array_equal(out[centre], frame[centre])
    assert mean_local_contrast(out[centre]) < 0.5 * mean_local_contrast(frame[centre])


def test_two_faces_do_not_interfere(frame, anonymiser):
    precise = contour_face(80, 120, 40)
    coarse = FaceRecord(bounds=BoundingRegion(200, 80, 60, 80), contours=None)

    both = anonymiser.apply(frame, [precise, coarse])
    only_precise = anonymiser.apply(frame, [precise])
    only_coarse = anonymiser.apply(frame, [coarse])

    left = np.s_[:, :150]
    right = np.s_[:, 150:]
    assert np.array_equal(both[left], only_precise[left])
    assert np.array_equal(both[right], only_coarse[right])

    gap = np.s_[:, 135:185]
    assert np.array_equal(both[gap], frame[gap])
    assert not np.array_equal(both[110:130, 70:90], frame[110:130, 70:90])
    assert not np.array_equal(both[110:130, 220:240], frame[110:130, 220:240])


def test_processing_is_idempotent(frame, anonymiser):
    faces = [contour_face(80, 120, 40), FaceRecord(BoundingRegion(200, 80, 60, 80))]
    first = anonymiser.apply(frame, faces)
    second = anonymiser.apply(frame, faces)
    assert np.array_equal(first, second)


def test_input_frame_untouched(frame, anonymiser):
    original = frame.copy()
    anonymiser.apply(frame, [contour_face(80, 120, 40)])
    assert np.array_equal(frame, original)


def test_one_save_restore_pair_per_non_empty_mask(frame, anonymiser):
    faces = [
        contour_face(80, 120, 40),
        FaceRecord(BoundingRegion(10, 10, 0, 30)),          # degenerate bounds
        FaceRecord(BoundingRegion(0, 0, 30, 30), contours={}),  # no usable contours
        FaceRecord(BoundingRegion(200, 80, 60, 80)),
    ]
    canvas = SpyCanvas(frame)
    clip_before = canvas.clip
    anonymiser.process(canvas, faces)

    assert canvas.saves == 2
    assert canvas.restores == 2
    assert canvas.clips == 2
    # base layer + one filtered draw per masked face
    assert canvas.draw_calls == 3
    assert canvas.clip is clip_before
    assert canvas.save_count == 0


def test_empty_mask_face_costs_no_draw(frame, anonymiser):
    canvas = SpyCanvas(frame)
    anonymiser.process(canvas, [FaceRecord(BoundingRegion(0, 0, 40, 40), contours={})])
    assert canvas.draw_calls == 1
    assert canvas.saves == 0
    assert np.array_equal(canvas.target, frame)


def test_strict_mode_leaves_coarse_faces_sharp(frame, sink):
    strict = ContourBlurAnonymiser(MaskBuilder(fallback=FallbackPolicy.DROP), make_blur(6), sink)
    out = strict.apply(frame, [FaceRecord(BoundingRegion(100, 100, 50, 80))])
    assert np.array_equal(out, frame)


def test_draw_failure_restores_and_continues(frame, anonymiser, sink):
    faces = [contour_face(80, 120, 40), FaceRecord(BoundingRegion(200, 80, 60, 80))]
    canvas = FlakyCanvas(frame)
    anonymiser.process(canvas, faces)

    assert canvas.saves == canvas.restores == 2
    assert canvas.clip is None
    assert sink.names() == [DRAW_FAILED]
    assert sink.events[0][1]["face_index"] == 0

    # first face stays sharp, second is still blurred
    assert np.array_equal(canvas.target[:, :150], frame[:, :150])
    assert not np.array_equal(canvas.target[110:130, 220:240], frame[110:130, 220:240])


def test_unexpected_error_propagates_after_restore(frame, anonymiser):
    class Broken(SpyCanvas):
        def render(self, effect=None):
            if effect is not None:
                raise MemoryError("out of memory")
            super().render(effect)

    canvas = Broken(frame)
    with pytest.raises(MemoryError):
        anonymiser.process(canvas, [contour_face(80, 120, 40)])
    assert canvas.restores == 1
    assert canvas.clip is None


def test_explicit_blur_overrides_default(frame, anonymiser):
    face = FaceRecord(BoundingRegion(100, 100, 50, 80))
    canvas = FrameCanvas(frame)
    anonymiser.process(canvas, [face], blur=make_blur(0))
    assert np.array_equal(canvas.target, frame)
