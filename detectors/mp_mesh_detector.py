import cv2
import mediapipe as mp
import numpy as np

from .base_detector import BaseDetector
from .config import DetectorConfig
from .contours import mesh_to_face


class MediaPipeMeshDetector(BaseDetector):
    """
    Face Mesh landmarks traced into per-feature contours.

    "fast" keeps the 468-point mesh; "accurate" refines eyes and irises.
    With contour_mode "none" the records only carry bounding regions.
    """
    def __init__(self, config: DetectorConfig = None):
        config = config or DetectorConfig()
        self.mesh = mp.solutions.face_mesh.FaceMesh(
            max_num_faces=config.max_faces,
            refine_landmarks=config.performance_mode == "accurate",
            static_image_mode=False,
            min_detection_confidence=config.min_confidence,
        )

    def detect(self, frame, config):
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        res = self.mesh.process(rgb)

        h, w = frame.shape[:2]
        faces = []

        if res.multi_face_landmarks:
            for fl in res.multi_face_landmarks:
                pts = np.array([
                    (lm.x * w, lm.y * h) for lm in fl.landmark
                ], dtype=np.float32)
                faces.append(mesh_to_face(pts, with_contours=config.wants_contours))

        return faces

    def close(self):
        self.mesh.close()
