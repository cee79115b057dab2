"""
Keypoint model — named COCO-17 landmarks and the per-frame container.

Frames arrive from an external pose estimator in a few shapes; ``Frame.from_any``
normalises all of them into a name -> Keypoint mapping.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np


# COCO 17-keypoint indices
KEYPOINT_NAMES = {
    'nose': 0, 'left_eye': 1, 'right_eye': 2,
    'left_ear': 3, 'right_ear': 4,
    'left_shoulder': 5, 'right_shoulder': 6,
    'left_elbow': 7, 'right_elbow': 8,
    'left_wrist': 9, 'right_wrist': 10,
    'left_hip': 11, 'right_hip': 12,
    'left_knee': 13, 'right_knee': 14,
    'left_ankle': 15, 'right_ankle': 16,
}

# Landmarks the posture rules depend on (eyes and ears are not used)
REQUIRED_KEYPOINTS = (
    'nose',
    'left_shoulder', 'right_shoulder',
    'left_elbow', 'right_elbow',
    'left_wrist', 'right_wrist',
    'left_hip', 'right_hip',
    'left_knee', 'right_knee',
    'left_ankle', 'right_ankle',
)


@dataclass(frozen=True)
class Keypoint:
    """A named 2D landmark with the estimator's confidence."""
    name: str
    x: float
    y: float
    score: float = 1.0

    def to_dict(self) -> dict:
        return {'name': self.name, 'x': self.x, 'y': self.y, 'score': self.score}


def _to_keypoint(name: str, value) -> Keypoint:
    if isinstance(value, Keypoint):
        return value
    try:
        if isinstance(value, Mapping):
            score = value.get('score')
            return Keypoint(
                name=name,
                x=float(value['x']),
                y=float(value['y']),
                score=1.0 if score is None else float(score),
            )
        if isinstance(value, (Sequence, np.ndarray)) and not isinstance(value, str):
            if len(value) < 2:
                raise ValueError(f"keypoint '{name}' needs at least x and y, got {value!r}")
            score = float(value[2]) if len(value) > 2 else 1.0
            return Keypoint(name=name, x=float(value[0]), y=float(value[1]), score=score)
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed keypoint '{name}': {value!r}") from e
    raise ValueError(f"unsupported keypoint value for '{name}': {type(value).__name__}")


@dataclass
class Frame:
    """All keypoints detected for one person at one instant."""
    keypoints: Dict[str, Keypoint] = field(default_factory=dict)

    @classmethod
    def from_any(cls, data) -> 'Frame':
        """
        Build a Frame from any supported input:
            - a Frame (returned as-is)
            - mapping name -> {x, y, score} / (x, y[, score]) / Keypoint
            - sequence of dicts or Keypoints each carrying a ``name``
            - (17, 2) or (17, 3) array in COCO order
        Entries that are ``None`` are treated as missing.
        """
        if isinstance(data, Frame):
            return data
        if data is None:
            return cls()
        if isinstance(data, np.ndarray):
            return cls.from_array(data)
        if isinstance(data, Mapping):
            return cls({
                name: _to_keypoint(name, value)
                for name, value in data.items() if value is not None
            })
        if isinstance(data, Sequence) and not isinstance(data, str):
            keypoints = {}
            for item in data:
                if item is None:
                    continue
                if isinstance(item, Keypoint):
                    keypoints[item.name] = item
                elif isinstance(item, Mapping) and item.get('name'):
                    keypoints[item['name']] = _to_keypoint(item['name'], item)
                else:
                    raise ValueError(f"keypoint entry without a name: {item!r}")
            return cls(keypoints)
        raise ValueError(f"unsupported frame type: {type(data).__name__}")

    @classmethod
    def from_array(cls, kps: np.ndarray) -> 'Frame':
        """Build from a COCO-ordered (17, 2|3) array of x, y[, score]."""
        kps = np.asarray(kps, dtype=np.float64)
        if kps.ndim != 2 or kps.shape[0] < len(KEYPOINT_NAMES) or kps.shape[1] < 2:
            raise ValueError(f"expected a (17, 2) or (17, 3) keypoint array, got {kps.shape}")
        keypoints = {}
        for name, idx in KEYPOINT_NAMES.items():
            score = float(kps[idx, 2]) if kps.shape[1] > 2 else 1.0
            keypoints[name] = Keypoint(name, float(kps[idx, 0]), float(kps[idx, 1]), score)
        return cls(keypoints)

    def get(self, name: str) -> Optional[Keypoint]:
        return self.keypoints.get(name)

    def __getitem__(self, name: str) -> Keypoint:
        return self.keypoints[name]

    def __contains__(self, name: str) -> bool:
        return name in self.keypoints

    def __len__(self) -> int:
        return len(self.keypoints)

    def missing(self, names: Iterable[str] = REQUIRED_KEYPOINTS,
                min_score: float = 0.0) -> List[str]:
        """Names that are absent or scored below ``min_score``."""
        return [
            name for name in names
            if name not in self.keypoints or self.keypoints[name].score < min_score
        ]

    def is_usable(self, names: Iterable[str] = REQUIRED_KEYPOINTS,
                  min_score: float = 0.0) -> bool:
        """Check if all named keypoints are present with sufficient confidence."""
        return not self.missing(names, min_score)

    def to_dict(self) -> dict:
        return {name: kp.to_dict() for name, kp in self.keypoints.items()}
