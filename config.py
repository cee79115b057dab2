"""
Configuration Management for the PoseActivity engine
Loads environment variables and provides configuration settings
"""

import os
from dataclasses import fields

from dotenv import load_dotenv

from engines.pose_activity.rules import ActivityRules

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', '')

    # Classification loop
    CLASSIFY_INTERVAL_MS = int(os.getenv('CLASSIFY_INTERVAL_MS', 100))
    MIN_POSE_SCORE = float(os.getenv('MIN_POSE_SCORE', 0.3))
    MIN_KEYPOINT_SCORE = float(os.getenv('MIN_KEYPOINT_SCORE', 0.3))

    # Prefix for per-threshold overrides, e.g. ACTIVITY_MOVING_THRESHOLD=20
    RULES_ENV_PREFIX = 'ACTIVITY_'

    @classmethod
    def activity_rules(cls, environ=None) -> ActivityRules:
        """Build ActivityRules from defaults plus ACTIVITY_<FIELD> overrides."""
        environ = os.environ if environ is None else environ
        overrides = {'min_keypoint_score': cls.MIN_KEYPOINT_SCORE}
        for f in fields(ActivityRules):
            raw = environ.get(cls.RULES_ENV_PREFIX + f.name.upper())
            if raw is None or raw == '':
                continue
            try:
                overrides[f.name] = int(raw) if f.type in (int, 'int') else float(raw)
            except ValueError:
                raise ValueError(
                    f"Invalid value for {cls.RULES_ENV_PREFIX}{f.name.upper()}: {raw!r}"
                ) from None
        return ActivityRules(**overrides)
