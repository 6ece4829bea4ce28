from ultralytics import YOLO

from .base_detector import BaseDetector


class YOLOFaceDetector(BaseDetector):
    """Bounding boxes only: every record it produces is coarse."""

    def __init__(self, model_path="pretrained_model.pt"):
        self.model = YOLO(model_path)

    def detect(self, frame, config):
        results = self.model(
            frame,
            stream=False,
            verbose=False,
            conf=config.min_confidence,
            max_det=config.max_faces,
        )[0]
        faces = []
        for box in results.boxes:
            x1, y1, x2, y2 = box.xyxy[0].tolist()
            faces.append({
                "bbox": [x1, y1, x2, y2],
                "contours": None   # no landmarks from this model
            })
        return faces
