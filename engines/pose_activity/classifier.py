"""
Activity Classifier — maps one frame of keypoints to one activity label.

Per-frame posture rules are evaluated in a fixed priority order; the first rule
that matches wins. Two rules (Waving, Movement) read the short nose/wrist
histories, which are updated before the rules run so the current frame is part
of the motion window.

The decision itself is a pure function of (frame, history snapshot);
``ActivityClassifier`` is a thin owner of the two ring buffers around it.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from engines.pose_activity.features import PostureFeatures, compute_features
from engines.pose_activity.geometry import midpoint
from engines.pose_activity.history import (
    HistoryBuffer, HistorySnapshot, PositionSample, WristPairSample,
)
from engines.pose_activity.keypoints import Frame, REQUIRED_KEYPOINTS
from engines.pose_activity.motion import is_moving, is_waving
from engines.pose_activity.rules import (
    ActivityLabel, ActivityRules, DEFAULT_ACTIVITY, RULE_ORDER,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleContext:
    """Everything a posture rule may look at for one frame."""
    frame: Frame
    features: PostureFeatures
    positions: Sequence[PositionSample]
    wrists: Sequence[WristPairSample]
    rules: ActivityRules


Predicate = Callable[[RuleContext], bool]


def _level(frame: Frame, joint: str, tolerance: float) -> bool:
    return abs(frame[f'left_{joint}'].y - frame[f'right_{joint}'].y) < tolerance


def _raising_hands(ctx: RuleContext) -> bool:
    f, margin = ctx.frame, ctx.rules.raise_margin
    # at least `margin` above each shoulder
    return (f['left_wrist'].y <= f['left_shoulder'].y - margin
            and f['right_wrist'].y <= f['right_shoulder'].y - margin)


def _waving(ctx: RuleContext) -> bool:
    return is_waving(ctx.wrists, ctx.rules)


def _squatting(ctx: RuleContext) -> bool:
    f, feat, r = ctx.frame, ctx.features, ctx.rules
    _, shoulder_mid_y = midpoint(f['left_shoulder'], f['right_shoulder'])
    return (feat.left_knee_angle < r.squat_knee_angle
            and feat.right_knee_angle < r.squat_knee_angle      # bent knees
            and feat.left_hip_angle > r.squat_hip_angle
            and feat.right_hip_angle > r.squat_hip_angle        # hip flexion
            and _level(f, 'shoulder', r.level_tolerance)        # upright torso
            and f['nose'].y < shoulder_mid_y)                   # head above shoulders


def _sitting(ctx: RuleContext) -> bool:
    f, feat, r = ctx.frame, ctx.features, ctx.rules
    return (feat.left_knee_angle < r.sit_knee_angle
            and feat.right_knee_angle < r.sit_knee_angle
            # hips at knee level or only slightly above
            and f['left_hip'].y > f['left_knee'].y - r.sit_hip_knee_margin
            and f['right_hip'].y > f['right_knee'].y - r.sit_hip_knee_margin
            and feat.shoulder_hip_ratio < r.sit_max_shoulder_hip_ratio
            and feat.hip_knee_ratio > r.sit_min_hip_knee_ratio)


def _moving(ctx: RuleContext) -> bool:
    return is_moving(ctx.positions, ctx.rules)


def _standing(ctx: RuleContext) -> bool:
    f, feat, r = ctx.frame, ctx.features, ctx.rules
    return (feat.left_knee_angle > r.stand_knee_angle
            and feat.right_knee_angle > r.stand_knee_angle     # straight legs
            and _level(f, 'shoulder', r.level_tolerance)
            and _level(f, 'hip', r.level_tolerance)
            and _level(f, 'knee', r.level_tolerance)
            and feat.shoulder_hip_ratio > r.stand_min_shoulder_hip_ratio
            and feat.hip_knee_ratio > r.stand_min_hip_knee_ratio)


_PREDICATES = {
    ActivityLabel.RAISING_HANDS: _raising_hands,
    ActivityLabel.WAVING: _waving,
    ActivityLabel.SQUATTING: _squatting,
    ActivityLabel.SITTING: _sitting,
    ActivityLabel.MOVEMENT: _moving,
    ActivityLabel.STANDING: _standing,
}

# Ordered (label, predicate) chain; Stable is the fallback
ACTIVITY_RULES: Tuple[Tuple[ActivityLabel, Predicate], ...] = tuple(
    (label, _PREDICATES[label]) for label in RULE_ORDER
)


def decide(ctx: RuleContext) -> ActivityLabel:
    """Return the label of the first matching rule, or Stable."""
    for label, predicate in ACTIVITY_RULES:
        if predicate(ctx):
            return label
    return DEFAULT_ACTIVITY


def classify_frame(frame, history: Optional[HistorySnapshot] = None,
                   rules: Optional[ActivityRules] = None
                   ) -> Tuple[ActivityLabel, HistorySnapshot]:
    """
    Pure classification step.

    Returns the label and the history to use for the next frame. Frames missing a
    required keypoint (or holding one below ``rules.min_keypoint_score``) yield
    Stable and leave the history untouched.
    """
    rules = rules or ActivityRules()
    history = history or HistorySnapshot()
    frame = Frame.from_any(frame)

    if not frame.is_usable(REQUIRED_KEYPOINTS, rules.min_keypoint_score):
        return DEFAULT_ACTIVITY, history

    history = history.append(
        PositionSample.of(frame['nose']),
        WristPairSample.of(frame['left_wrist'], frame['right_wrist']),
        position_capacity=rules.position_capacity,
        wrist_capacity=rules.wrist_capacity,
    )
    ctx = RuleContext(frame, compute_features(frame),
                      history.positions, history.wrists, rules)
    return decide(ctx), history


class ActivityClassifier:
    """
    Stateful per-stream classifier.

    Owns the nose and wrist histories for one capture stream. Not thread-safe:
    calls must be serialised, one instance per stream.
    """

    def __init__(self, rules: Optional[ActivityRules] = None):
        self.rules = rules or ActivityRules()
        self.position_history = HistoryBuffer(self.rules.position_capacity)
        self.wrist_history = HistoryBuffer(self.rules.wrist_capacity)
        self._frames_seen = 0
        self._frames_rejected = 0

    @property
    def history(self) -> HistorySnapshot:
        return HistorySnapshot(self.position_history.snapshot(),
                               self.wrist_history.snapshot())

    def classify(self, frame) -> ActivityLabel:
        """Classify one frame and record its nose/wrist positions."""
        frame = Frame.from_any(frame)
        self._frames_seen += 1

        missing = frame.missing(REQUIRED_KEYPOINTS, self.rules.min_keypoint_score)
        if missing:
            self._frames_rejected += 1
            logger.debug(f"Incomplete frame, missing/low-score keypoints: {missing}")
            return DEFAULT_ACTIVITY

        self.position_history.append(PositionSample.of(frame['nose']))
        self.wrist_history.append(
            WristPairSample.of(frame['left_wrist'], frame['right_wrist']))

        ctx = RuleContext(
            frame=frame,
            features=compute_features(frame),
            positions=self.position_history.snapshot(),
            wrists=self.wrist_history.snapshot(),
            rules=self.rules,
        )
        label = decide(ctx)
        logger.debug(f"Activity: {label.value} ({ctx.features.to_dict()})")
        return label

    def features(self, frame) -> Optional[PostureFeatures]:
        """Posture features for a frame, or None if it is incomplete. No side effects."""
        frame = Frame.from_any(frame)
        if not frame.is_usable(REQUIRED_KEYPOINTS, self.rules.min_keypoint_score):
            return None
        return compute_features(frame)

    def reset_history(self) -> None:
        """Forget all recorded positions (new session / tests)."""
        self.position_history.clear()
        self.wrist_history.clear()
        logger.info("Activity history cleared")

    def get_stats(self) -> dict:
        return {
            'frames_seen': self._frames_seen,
            'frames_rejected': self._frames_rejected,
            'position_samples': len(self.position_history),
            'wrist_samples': len(self.wrist_history),
        }
