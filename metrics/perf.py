from __future__ import annotations
import numpy as np


def summarise_seconds(samples):
    """
    Summarise a list of durations in seconds.
    Returns ms stats: mean, p50, p90, p95, p99, max.
    """
    arr = np.array(samples, dtype=np.float64)
    keys = ("mean_ms", "p50_ms", "p90_ms", "p95_ms", "p99_ms", "max_ms")
    if arr.size == 0:
        return {"n": 0, **{k: None for k in keys}}

    ms = arr * 1000.0
    return {
        "n": int(arr.size),
        "mean_ms": float(ms.mean()),
        "p50_ms": float(np.percentile(ms, 50)),
        "p90_ms": float(np.percentile(ms, 90)),
        "p95_ms": float(np.percentile(ms, 95)),
        "p99_ms": float(np.percentile(ms, 99)),
        "max_ms": float(ms.max()),
    }


def fraction_over_budget(samples, budget_ms):
    """Share of durations (seconds) above budget_ms, None without samples."""
    arr = np.array(samples, dtype=np.float64)
    if arr.size == 0 or budget_ms is None:
        return None
    return float(np.mean(arr * 1000.0 > budget_ms))
