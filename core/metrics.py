"""Minimal in-memory metrics collector.

Purpose:
    - Counters and simple latency samples for config load health.
    - Zero external deps; can be swapped by Prometheus exporter later.

Core API (intentionally tiny):
    inc(name, labels=None, value=1)
    observe(name, value, labels=None)
    snapshot() -> dict (copy for safe reading)

Thread-safety: coarse RLock; overhead negligible for low event volume.

Config metric names (documented for discoverability):
    - config_load_attempts_total
    - config_load_failures_total{error_type}
    - config_load_total{outcome}          # loaded | cached | default
    - config_load_latency_ms              # observation per load()
    - config_saved_total
    - config_reload_requests_total        # POST /config/reload
"""
from __future__ import annotations

from threading import RLock
from time import time
from typing import Dict, Tuple, Any

_COUNTERS: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float] = {}
_HIST: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], list] = {}
_LOCK = RLock()


def _norm_labels(labels: dict[str, Any] | None) -> Tuple[Tuple[str, str], ...]:
    if not labels:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def _label_str(labels: Tuple[Tuple[str, str], ...]) -> str:
    if not labels:
        return ""
    return "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


def inc(
    name: str,
    labels: dict[str, Any] | None = None,
    value: float = 1.0,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0.0) + value


def observe(
    name: str,
    value: float,
    labels: dict[str, Any] | None = None,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _HIST.setdefault(key, []).append(value)


def snapshot() -> dict[str, Any]:
    with _LOCK:
        counters = {
            name + _label_str(labels): v
            for (name, labels), v in _COUNTERS.items()
        }
        hist = {}
        for (name, labels), vals in _HIST.items():
            if not vals:
                continue
            hist[name + _label_str(labels)] = {
                "count": len(vals),
                "min": min(vals),
                "max": max(vals),
                "p50": sorted(vals)[len(vals) // 2],
                "last": vals[-1],
            }
        return {"ts": time(), "counters": counters, "histograms": hist}


def reset_for_tests() -> None:  # pragma: no cover
    with _LOCK:
        _COUNTERS.clear()
        _HIST.clear()


# ------------------- Config helpers -------------------

def inc_load_failure(error_type: str) -> None:
    """Count one failed load attempt, labelled by taxonomy code."""
    inc("config_load_failures_total", {"error_type": error_type})


def inc_load_outcome(outcome: str) -> None:
    """Count a finished load() by where its result came from.

    outcome: loaded | cached | default
    """
    inc("config_load_total", {"outcome": outcome})


__all__ = [
    "inc",
    "observe",
    "snapshot",
    "reset_for_tests",
    "inc_load_failure",
    "inc_load_outcome",
]
