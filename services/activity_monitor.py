"""
Activity Monitor Service — drives one ActivityClassifier from a pose source.

Each cycle pulls the detected poses for the latest video frame, keeps only a
confident primary pose, classifies it and publishes the current activity.
A failing cycle is logged and skipped; the last label stays current.

Usage:
    monitor = ActivityMonitor(pose_source=estimator.estimate_latest)
    stop = threading.Event()
    threading.Thread(target=monitor.run, args=(stop,), daemon=True).start()
    ...
    monitor.current_activity   # ActivityLabel
"""

import logging
import threading
import time
from collections.abc import Mapping
from typing import Any, Callable, List, Optional

from config import Config
from engines.pose_activity import ActivityClassifier, ActivityLabel, DEFAULT_ACTIVITY

logger = logging.getLogger(__name__)

# Returns the poses for the latest frame, or None when no frame is available
PoseSource = Callable[[], Optional[List[Any]]]


def _pose_field(pose, name: str, default=None):
    if isinstance(pose, Mapping):
        return pose.get(name, default)
    return getattr(pose, name, default)


class ActivityMonitor:
    """Fixed-interval classification loop around a single classifier."""

    def __init__(self, pose_source: Optional[PoseSource] = None,
                 classifier: Optional[ActivityClassifier] = None,
                 ready_check: Optional[Callable[[], bool]] = None,
                 min_pose_score: Optional[float] = None,
                 interval_ms: Optional[int] = None):
        """
        Args:
            pose_source: callable returning the latest list of poses
            classifier: classifier to drive (built from Config if omitted)
            ready_check: callable reporting whether the video stream is usable
            min_pose_score: primary pose must score above this to be classified
            interval_ms: cycle period for run()
        """
        self.pose_source = pose_source
        self.classifier = classifier or ActivityClassifier(rules=Config.activity_rules())
        self.ready_check = ready_check
        self.min_pose_score = Config.MIN_POSE_SCORE if min_pose_score is None else min_pose_score
        self.interval_ms = Config.CLASSIFY_INTERVAL_MS if interval_ms is None else interval_ms

        self.current_activity: ActivityLabel = DEFAULT_ACTIVITY
        self.stream_ready = True
        self.processed_count = 0
        self.skipped_count = 0
        self.error_count = 0
        self.last_detection_time = 0.0
        self._lock = threading.Lock()

    def process(self, poses: Optional[List[Any]]) -> ActivityLabel:
        """
        Classify the primary pose of one frame.

        Frames without poses, or whose first pose scores at or below
        ``min_pose_score``, are skipped and leave the current label unchanged.
        """
        if not poses:
            self.skipped_count += 1
            return self.current_activity

        pose = poses[0]
        score = _pose_field(pose, 'score')
        try:
            score = None if score is None else float(score)
        except (TypeError, ValueError):
            self.skipped_count += 1
            logger.warning(f"Skipping pose with non-numeric score: {score!r}")
            return self.current_activity
        if score is None or score <= self.min_pose_score:
            self.skipped_count += 1
            logger.debug(f"Skipping low-confidence pose (score={score})")
            return self.current_activity

        try:
            with self._lock:
                label = self.classifier.classify(_pose_field(pose, 'keypoints'))
        except Exception as e:
            logger.error(f"Error during activity classification: {e}")
            self.error_count += 1
            self.stream_ready = False
            return self.current_activity

        if label != self.current_activity:
            logger.info(f"Activity changed: {self.current_activity.value} -> {label.value}")
        self.current_activity = label
        self.processed_count += 1
        self.last_detection_time = time.time()
        return label

    def step(self) -> ActivityLabel:
        """Run one cycle: check the stream, fetch poses, classify."""
        if self.ready_check is not None:
            self.stream_ready = bool(self.ready_check())
        elif not self.stream_ready:
            # No readiness probe: sit out one cycle after an error, then retry
            self.stream_ready = True
            return self.current_activity

        if not self.stream_ready or self.pose_source is None:
            return self.current_activity

        try:
            poses = self.pose_source()
        except Exception as e:
            logger.error(f"Error during pose detection: {e}")
            self.error_count += 1
            self.stream_ready = False
            return self.current_activity

        return self.process(poses)

    def run(self, stop_event: threading.Event) -> None:
        """Call step() every ``interval_ms`` until ``stop_event`` is set."""
        interval = self.interval_ms / 1000.0
        logger.info(f"Activity monitor started (interval={self.interval_ms}ms)")
        while not stop_event.is_set():
            started = time.monotonic()
            self.step()
            stop_event.wait(max(0.0, interval - (time.monotonic() - started)))
        logger.info(f"Activity monitor stopped ({self.get_stats()})")

    def reset(self) -> None:
        """Start a new session: clear history and fall back to Stable."""
        with self._lock:
            self.classifier.reset_history()
        self.current_activity = DEFAULT_ACTIVITY

    def get_stats(self) -> dict:
        return {
            'current_activity': self.current_activity.value,
            'stream_ready': self.stream_ready,
            'processed': self.processed_count,
            'skipped': self.skipped_count,
            'errors': self.error_count,
            'min_pose_score': self.min_pose_score,
            'interval_ms': self.interval_ms,
            **self.classifier.get_stats(),
        }
