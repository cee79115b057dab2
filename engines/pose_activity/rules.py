"""
Activity Rules — configurable thresholds and label vocabulary for posture
classification. All tunable parameters live here for easy adjustment.

IMPORTANT: These thresholds are tuned for a 640x480 webcam with the subject
standing a few metres away, sampled every ~100ms. Pixel thresholds do not carry
over to other resolutions without recalibration.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class ActivityLabel(str, Enum):
    """Closed vocabulary of activity labels. Values are the display strings."""
    STANDING = 'Standing'
    MOVEMENT = 'Movement'
    RAISING_HANDS = 'Raising Hands'
    WAVING = 'Waving'
    SITTING = 'Sitting'
    SQUATTING = 'Squatting'
    STABLE = 'Stable'

    def __str__(self) -> str:
        return self.value


DEFAULT_ACTIVITY = ActivityLabel.STABLE

# Evaluation order of the posture rules, first match wins.
# STABLE is not listed: it is the fallback when nothing matches.
RULE_ORDER: Tuple[ActivityLabel, ...] = (
    ActivityLabel.RAISING_HANDS,
    ActivityLabel.WAVING,
    ActivityLabel.SQUATTING,
    ActivityLabel.SITTING,
    ActivityLabel.MOVEMENT,
    ActivityLabel.STANDING,
)

# Activity metadata: what each label means and whether it needs history
ACTIVITY_METADATA: Dict[ActivityLabel, dict] = {
    ActivityLabel.STANDING:      {'description': 'Upright with straight legs', 'temporal': False},
    ActivityLabel.MOVEMENT:      {'description': 'Head travelling across the frame', 'temporal': True},
    ActivityLabel.RAISING_HANDS: {'description': 'Both wrists above the shoulders', 'temporal': False},
    ActivityLabel.WAVING:        {'description': 'Side-to-side wrist motion', 'temporal': True},
    ActivityLabel.SITTING:       {'description': 'Knees bent with hips near knee level', 'temporal': False},
    ActivityLabel.SQUATTING:     {'description': 'Deep knee bend with upright torso', 'temporal': False},
    ActivityLabel.STABLE:        {'description': 'No recognised activity', 'temporal': False},
}


@dataclass
class ActivityRules:
    """
    Configurable thresholds for posture and motion rules.
    Distances are in input pixels, angles in degrees.
    """

    # ── Keypoint validation ──
    min_keypoint_score: float = 0.3       # keypoints below this are unusable

    # ── History buffers ──
    position_capacity: int = 10           # nose samples retained
    wrist_capacity: int = 20              # wrist-pair samples retained

    # ── Movement detection ──
    moving_window: int = 5                # samples averaged (4 displacements)
    moving_threshold: float = 15.0        # px: mean displacement per sample

    # ── Waving detection ──
    waving_window: int = 10               # samples inspected (9 deltas)
    waving_threshold: float = 20.0        # px: mean horizontal delta per sample
    waving_dominance: float = 2.0         # horizontal must exceed this x vertical

    # ── Raising hands ──
    raise_margin: float = 50.0            # px: wrist above shoulder

    # ── Posture geometry ──
    level_tolerance: float = 30.0         # px: left/right pair counts as level
    squat_knee_angle: float = 100.0       # knee angle below this = deep bend
    squat_hip_angle: float = 45.0         # hip angle above this = hip flexion
    sit_knee_angle: float = 120.0         # knee angle below this = seated bend
    sit_hip_knee_margin: float = 20.0     # px: hip no more than this above knee
    sit_max_shoulder_hip_ratio: float = 0.4
    sit_min_hip_knee_ratio: float = 0.3
    stand_knee_angle: float = 160.0       # knee angle above this = straight leg
    stand_min_shoulder_hip_ratio: float = 0.3
    stand_min_hip_knee_ratio: float = 0.3
