# pipeline/config.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from anonymisers.filters import DEFAULT_BLUR_RADIUS, TileMode
from anonymisers.mask import DEFAULT_CONTOUR_KINDS, FallbackPolicy
from detectors.config import DetectorConfig
from detectors.face import ContourKind

DETECTORS = ("mediapipe", "yolo")


@dataclass
class SessionConfig:
    """
    Policy fixed for a whole capture session. Nothing here changes per frame.

    precise_masking turns contour detection on; without it every face gets
    the bounding-region fallback. contour_kinds=None traces every kind.
    """
    precise_masking: bool = True
    blur_radius: float = DEFAULT_BLUR_RADIUS
    tile_mode: TileMode = TileMode.REPEAT
    contour_kinds: Optional[Tuple[ContourKind, ...]] = field(default=DEFAULT_CONTOUR_KINDS)
    fallback: FallbackPolicy = FallbackPolicy.ELLIPSE
    detector: str = "mediapipe"
    yolo_weights: str = "weights/pretrained_model.pt"
    performance_mode: str = "fast"
    max_faces: int = 5
    frame_budget_ms: Optional[float] = 33.0

    def __post_init__(self):
        if self.detector not in DETECTORS:
            raise ValueError(f"Unknown detector: {self.detector!r} (choose from {DETECTORS})")
        if self.blur_radius < 0:
            raise ValueError("blur_radius must be >= 0")
        self.tile_mode = TileMode(self.tile_mode)
        self.fallback = FallbackPolicy(self.fallback)

    def detector_config(self) -> DetectorConfig:
        return DetectorConfig.for_masking(
            self.precise_masking,
            performance_mode=self.performance_mode,
            max_faces=self.max_faces,
        )

    @classmethod
    def from_args(cls, args) -> "SessionConfig":
        return cls(
            precise_masking=not args.coarse,
            blur_radius=args.blur_radius,
            tile_mode=TileMode(args.tile_mode),
            contour_kinds=None if args.all_contours else DEFAULT_CONTOUR_KINDS,
            fallback=FallbackPolicy.DROP if args.strict else FallbackPolicy.ELLIPSE,
            detector=args.detector,
            yolo_weights=args.weights,
            max_faces=args.max_faces,
            frame_budget_ms=args.frame_budget_ms,
        )
