"""
Motion detectors over the temporal buffers.

Both detectors return False while history is too short (cold start); that is a
normal state for the first frames of a session, not an error.
"""

import logging
from collections.abc import Mapping
from typing import Collection, Optional

import numpy as np

from engines.pose_activity.geometry import as_xy
from engines.pose_activity.rules import ActivityRules

logger = logging.getLogger(__name__)

_DEFAULT_RULES = ActivityRules()


def _last(history: Collection, n: int) -> list:
    if hasattr(history, 'recent'):
        return history.recent(n)
    return list(history)[-n:]


def _side(sample, side: str):
    if isinstance(sample, Mapping):
        return sample[side]
    return getattr(sample, side)


def _track(samples: list) -> np.ndarray:
    """(N, 2) array of x, y."""
    return np.array([as_xy(s) for s in samples], dtype=np.float64).reshape(-1, 2)


def mean_displacement(samples: list) -> float:
    """Mean Euclidean step length between consecutive samples (0 for < 2 samples)."""
    if len(samples) < 2:
        return 0.0
    steps = np.diff(_track(samples), axis=0)
    return float(np.mean(np.sqrt((steps ** 2).sum(axis=1))))


def is_moving(positions: Collection, rules: Optional[ActivityRules] = None) -> bool:
    """
    Check whether the reference point is travelling.

    Averages the displacement between consecutive samples over the last
    ``rules.moving_window`` positions and compares it to ``rules.moving_threshold``.
    """
    rules = rules or _DEFAULT_RULES
    window = rules.moving_window
    if len(positions) < window:
        return False
    return mean_displacement(_last(positions, window)) > rules.moving_threshold


def _wrist_waving(samples: list, side: str, rules: ActivityRules) -> bool:
    deltas = np.abs(np.diff(_track([_side(s, side) for s in samples]), axis=0))
    avg_dx, avg_dy = (float(v) for v in deltas.mean(axis=0))
    waving = avg_dx > rules.waving_threshold and avg_dx > rules.waving_dominance * avg_dy
    if waving:
        logger.debug(f"{side} wrist waving: avg_dx={avg_dx:.1f} avg_dy={avg_dy:.1f}")
    return waving


def is_waving(wrists: Collection, rules: Optional[ActivityRules] = None) -> bool:
    """
    Check for side-to-side hand motion on either wrist.

    Over the last ``rules.waving_window`` wrist pairs, a wrist waves when its mean
    horizontal step exceeds ``rules.waving_threshold`` and dominates its mean
    vertical step by ``rules.waving_dominance``. One waving hand is enough.
    """
    rules = rules or _DEFAULT_RULES
    window = rules.waving_window
    if len(wrists) < window or window < 2:
        return False
    samples = _last(wrists, window)
    return (_wrist_waving(samples, 'left', rules)
            or _wrist_waving(samples, 'right', rules))
