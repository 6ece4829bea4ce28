class BaseDetector:
    """
    Face detection capability. detect(frame, config) must output a list
    with one entry per face, either FaceRecord objects or dicts:
        {
          "bbox": [x1, y1, x2, y2],
          "contours": {ContourKind or name: [(x, y), ...]} or None
        }
    An empty list means no faces. Errors may be raised freely; the
    DetectionAdapter turns them into an empty result.
    """
    def detect(self, frame, config):
        raise NotImplementedError

    def close(self):
        pass
