import json
import logging
import os
import time

import cv2
import numpy as np

from metrics.contrast import contrast_ratio

logger = logging.getLogger(__name__)


def face_mask_union(mask_builder, faces, shape):
    """Coverage of all faces' masks on one (H, W) grid."""
    cov = np.zeros(shape[:2], dtype=np.float32)
    for face in faces:
        region = mask_builder.build_mask(face)
        if not region.is_empty:
            np.maximum(cov, region.rasterize(shape), out=cov)
    return cov


def evaluate_video(session, video_path, limit=None, save=True, results_dir="results"):
    """
    Run a session over a video and measure how much detail survives inside
    the face masks (residual contrast ratio, lower = stronger anonymisation).
    """
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open {video_path}")

    ratios = []
    precise = coarse = frames_with_faces = 0
    frames = 0

    while limit is None or frames < limit:
        ret, frame = cap.read()
        if not ret:
            break

        anon = session.process_frame(frame)
        faces = session.last_faces
        frames += 1

        if not faces:
            continue
        frames_with_faces += 1
        coarse += sum(1 for f in faces if f.is_coarse)
        precise += sum(1 for f in faces if not f.is_coarse)

        mask = face_mask_union(session.anonymiser.mask_builder, faces, frame.shape)
        r = contrast_ratio(frame, anon, mask)
        if r == r:
            ratios.append(r)

    cap.release()

    out = {
        "detector": session.config.detector,
        "precise_masking": session.config.precise_masking,
        "blur_radius": session.config.blur_radius,
        "frames": frames,
        "frames_with_faces": frames_with_faces,
        "faces_precise": precise,
        "faces_coarse": coarse,
        "residual_contrast_mean": float(np.mean(ratios)) if ratios else None,
        "timestamp": time.time(),
    }

    if save:
        os.makedirs(results_dir, exist_ok=True)
        fname = os.path.join(results_dir, f"blur_eval_{out['detector']}.json")
        with open(fname, "w") as f:
            json.dump(out, f, indent=4)
        logger.info("saved %s", fname)

    return out
