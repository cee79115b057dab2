"""
Per-frame posture features: joint angles, averaged segment lengths and
segment-to-height ratios.
"""

from dataclasses import asdict, dataclass

from engines.pose_activity.geometry import angle_degrees, distance
from engines.pose_activity.keypoints import Frame


@dataclass(frozen=True)
class PostureFeatures:
    """Geometric features of one frame. Angles in degrees, lengths in pixels."""
    left_knee_angle: float
    right_knee_angle: float
    left_hip_angle: float
    right_hip_angle: float
    shoulder_hip_dist: float
    hip_knee_dist: float
    knee_ankle_dist: float
    total_height: float
    shoulder_hip_ratio: float
    hip_knee_ratio: float

    def to_dict(self) -> dict:
        return {key: round(value, 3) for key, value in asdict(self).items()}


def _segment(frame: Frame, upper: str, lower: str) -> float:
    """Mean of the left and right segment lengths."""
    return (distance(frame[f'left_{upper}'], frame[f'left_{lower}'])
            + distance(frame[f'right_{upper}'], frame[f'right_{lower}'])) / 2.0


def compute_features(frame: Frame) -> PostureFeatures:
    """Compute posture features. The frame must hold every required keypoint."""
    shoulder_hip = _segment(frame, 'shoulder', 'hip')
    hip_knee = _segment(frame, 'hip', 'knee')
    knee_ankle = _segment(frame, 'knee', 'ankle')
    total = shoulder_hip + hip_knee + knee_ankle

    return PostureFeatures(
        left_knee_angle=angle_degrees(frame['left_hip'], frame['left_knee'], frame['left_ankle']),
        right_knee_angle=angle_degrees(frame['right_hip'], frame['right_knee'], frame['right_ankle']),
        left_hip_angle=angle_degrees(frame['left_shoulder'], frame['left_hip'], frame['left_knee']),
        right_hip_angle=angle_degrees(frame['right_shoulder'], frame['right_hip'], frame['right_knee']),
        shoulder_hip_dist=shoulder_hip,
        hip_knee_dist=hip_knee,
        knee_ankle_dist=knee_ankle,
        total_height=total,
        # Coincident keypoints give zero height; report zero ratios instead of dividing
        shoulder_hip_ratio=shoulder_hip / total if total > 0 else 0.0,
        hip_knee_ratio=hip_knee / total if total > 0 else 0.0,
    )
