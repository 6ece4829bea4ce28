# pipeline/benchmark_latency.py
from __future__ import annotations
import cv2

from metrics.perf import fraction_over_budget, summarise_seconds


def benchmark_video_latency(
    session,
    video_path,
    num_frames=300,
    warmup=30,
):
    if not session.active:
        raise RuntimeError("Cannot benchmark an inactive session: frames would not be timed")

    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open {video_path}")

    # ---- Warmup ----
    for _ in range(warmup):
        ret, frame = cap.read()
        if not ret:
            break
        _ = session.adapter.detect(frame)

    detect_times = []
    anon_times = []
    total_times = []

    frames = 0
    while frames < num_frames:
        ret, frame = cap.read()
        if not ret:
            break

        session.process_frame(frame)
        timing = session.last_timing

        detect_times.append(timing.detect_s)
        anon_times.append(timing.anonymise_s)
        total_times.append(timing.total_s)

        frames += 1

    cap.release()

    return summarise_latency(detect_times, anon_times, total_times,
                             session.config.frame_budget_ms)


def summarise_latency(detect_times, anon_times, total_times, budget_ms=None):
    return {
        "frames": len(total_times),
        "detect": summarise_seconds(detect_times),
        "anonymise": summarise_seconds(anon_times),
        "total_process": summarise_seconds(total_times),
        "frame_budget_ms": budget_ms,
        "over_budget_rate": fraction_over_budget(total_times, budget_ms),
    }
