"""
Geometric helpers for 2D keypoints.

Points may be anything exposing ``x``/``y`` attributes (``Keypoint``,
history samples), a mapping with ``x``/``y`` keys, or an indexable ``(x, y, ...)``
such as a tuple or a numpy row.
Image coordinates: origin top-left, y grows downward.
"""

from collections.abc import Mapping
from typing import Tuple

import numpy as np


def as_xy(p) -> Tuple[float, float]:
    if hasattr(p, 'x') and hasattr(p, 'y'):
        return float(p.x), float(p.y)
    if isinstance(p, Mapping):
        return float(p['x']), float(p['y'])
    return float(p[0]), float(p[1])


def angle_degrees(p1, p2, p3) -> float:
    """Compute angle at point p2 formed by rays to p1 and p3, in degrees [0, 180].

    Coincident points give 0. Non-finite coordinates yield NaN rather than raising.
    """
    x1, y1 = as_xy(p1)
    x2, y2 = as_xy(p2)
    x3, y3 = as_xy(p3)
    radians = np.arctan2(y3 - y2, x3 - x2) - np.arctan2(y1 - y2, x1 - x2)
    angle = abs(float(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def distance(p1, p2) -> float:
    """Euclidean distance between two 2D points."""
    x1, y1 = as_xy(p1)
    x2, y2 = as_xy(p2)
    return float(np.sqrt((x2 - x1) ** 2 + (y2 - y1) ** 2))


def midpoint(p1, p2) -> Tuple[float, float]:
    """Average of two points."""
    x1, y1 = as_xy(p1)
    x2, y2 = as_xy(p2)
    return (x1 + x2) / 2.0, (y1 + y2) / 2.0
