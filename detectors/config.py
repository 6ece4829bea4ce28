# detectors/config.py
from __future__ import annotations

from dataclasses import dataclass

PERFORMANCE_MODES = ("fast", "accurate")
FEATURE_MODES = ("none", "all")


@dataclass(frozen=True)
class DetectorConfig:
    """
    Detection settings chosen once at session start.

    contour_mode / landmark_mode are "all" when faces should be masked along
    their contours, "none" when bounding regions are enough.
    """
    performance_mode: str = "fast"
    contour_mode: str = "all"
    landmark_mode: str = "all"
    classification_mode: str = "none"
    max_faces: int = 5
    min_confidence: float = 0.5

    def __post_init__(self):
        if self.performance_mode not in PERFORMANCE_MODES:
            raise ValueError(f"Unknown performance_mode: {self.performance_mode!r}")
        for name in ("contour_mode", "landmark_mode", "classification_mode"):
            value = getattr(self, name)
            if value not in FEATURE_MODES:
                raise ValueError(f"Unknown {name}: {value!r}")
        if self.max_faces < 1:
            raise ValueError("max_faces must be >= 1")

    @classmethod
    def for_masking(cls, precise: bool = True, **kwargs) -> "DetectorConfig":
        mode = "all" if precise else "none"
        return cls(contour_mode=mode, landmark_mode=mode, **kwargs)

    @property
    def wants_contours(self) -> bool:
        return self.contour_mode == "all"
