"""
Pose Activity Engine
Classifies posture and motion from COCO-17 keypoints into one activity label
per frame using geometric rules and short motion histories.

Usage:
    from engines.pose_activity import ActivityClassifier, ActivityRules

    classifier = ActivityClassifier(rules=ActivityRules())

    label = classifier.classify(keypoints)   # e.g. ActivityLabel.STANDING
"""

from engines.pose_activity.classifier import (
    ActivityClassifier, ACTIVITY_RULES, classify_frame,
)
from engines.pose_activity.features import PostureFeatures, compute_features
from engines.pose_activity.geometry import angle_degrees, distance, midpoint
from engines.pose_activity.history import (
    HistoryBuffer, HistorySnapshot, PositionSample, WristPairSample,
)
from engines.pose_activity.keypoints import Frame, Keypoint, KEYPOINT_NAMES, REQUIRED_KEYPOINTS
from engines.pose_activity.motion import is_moving, is_waving
from engines.pose_activity.rules import (
    ActivityLabel, ActivityRules, ACTIVITY_METADATA, DEFAULT_ACTIVITY, RULE_ORDER,
)

__all__ = [
    'ActivityClassifier', 'ACTIVITY_RULES', 'classify_frame',
    'PostureFeatures', 'compute_features',
    'angle_degrees', 'distance', 'midpoint',
    'HistoryBuffer', 'HistorySnapshot', 'PositionSample', 'WristPairSample',
    'Frame', 'Keypoint', 'KEYPOINT_NAMES', 'REQUIRED_KEYPOINTS',
    'is_moving', 'is_waving',
    'ActivityLabel', 'ActivityRules', 'ACTIVITY_METADATA', 'DEFAULT_ACTIVITY', 'RULE_ORDER',
]
