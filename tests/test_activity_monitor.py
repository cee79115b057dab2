"""
Tests for the ActivityMonitor service loop.
"""

import threading

from engines.pose_activity import ActivityClassifier, ActivityLabel
from services.activity_monitor import ActivityMonitor


def _standing_keypoints(x_offset=0):
    coords = {
        'nose': (300, 100),
        'left_shoulder': (270, 180), 'right_shoulder': (330, 180),
        'left_elbow': (250, 250), 'right_elbow': (350, 250),
        'left_wrist': (240, 300), 'right_wrist': (360, 300),
        'left_hip': (280, 320), 'right_hip': (320, 320),
        'left_knee': (280, 460), 'right_knee': (320, 460),
        'left_ankle': (280, 580), 'right_ankle': (320, 580),
    }
    return [{'name': name, 'x': x + x_offset, 'y': y, 'score': 0.9}
            for name, (x, y) in coords.items()]


def _pose(score=0.8, **kwargs):
    return {'score': score, 'keypoints': _standing_keypoints(**kwargs)}


class _BrokenClassifier(ActivityClassifier):
    def classify(self, frame):
        raise RuntimeError("boom")


class TestProcess:
    def test_confident_pose_is_classified(self):
        monitor = ActivityMonitor(min_pose_score=0.3)
        assert monitor.process([_pose()]) == ActivityLabel.STANDING
        assert monitor.current_activity == ActivityLabel.STANDING
        assert monitor.processed_count == 1

    def test_low_score_pose_is_skipped(self):
        monitor = ActivityMonitor(min_pose_score=0.3)
        monitor.process([_pose()])
        assert monitor.process([_pose(score=0.2, x_offset=500)]) == ActivityLabel.STANDING
        assert monitor.skipped_count == 1
        assert len(monitor.classifier.position_history) == 1

    def test_no_poses_keeps_current_label(self):
        monitor = ActivityMonitor()
        assert monitor.process([]) == ActivityLabel.STABLE
        assert monitor.process(None) == ActivityLabel.STABLE

    def test_only_first_pose_is_used(self):
        monitor = ActivityMonitor(min_pose_score=0.3)
        assert monitor.process([_pose(score=0.1), _pose(score=0.9)]) == ActivityLabel.STABLE
        assert monitor.skipped_count == 1

    def test_non_numeric_score_is_skipped(self):
        monitor = ActivityMonitor(min_pose_score=0.3)
        pose = {'score': 'high', 'keypoints': _standing_keypoints()}
        assert monitor.process([pose]) == ActivityLabel.STABLE
        assert monitor.skipped_count == 1
        assert len(monitor.classifier.position_history) == 0

    def test_numeric_string_score_is_accepted(self):
        monitor = ActivityMonitor(min_pose_score=0.3)
        pose = {'score': '0.9', 'keypoints': _standing_keypoints()}
        assert monitor.process([pose]) == ActivityLabel.STANDING

    def test_step_survives_non_numeric_score(self):
        monitor = ActivityMonitor(pose_source=lambda: [{'score': [0.9], 'keypoints': []}])
        assert monitor.step() == ActivityLabel.STABLE
        assert monitor.stream_ready is True

    def test_classification_error_keeps_label(self):
        monitor = ActivityMonitor(classifier=_BrokenClassifier())
        assert monitor.process([_pose()]) == ActivityLabel.STABLE
        assert monitor.error_count == 1
        assert monitor.stream_ready is False

    def test_reset(self):
        monitor = ActivityMonitor()
        monitor.process([_pose()])
        monitor.reset()
        assert monitor.current_activity == ActivityLabel.STABLE
        assert len(monitor.classifier.position_history) == 0


class TestStep:
    def test_step_pulls_from_source(self):
        monitor = ActivityMonitor(pose_source=lambda: [_pose()])
        assert monitor.step() == ActivityLabel.STANDING

    def test_not_ready_stream_is_skipped(self):
        calls = []

        def source():
            calls.append(1)
            return [_pose()]

        monitor = ActivityMonitor(pose_source=source, ready_check=lambda: False)
        assert monitor.step() == ActivityLabel.STABLE
        assert calls == []

    def test_source_error_skips_one_cycle(self):
        responses = [RuntimeError("camera lost"), [_pose()], [_pose()]]

        def source():
            item = responses.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        monitor = ActivityMonitor(pose_source=source)
        assert monitor.step() == ActivityLabel.STABLE
        assert monitor.stream_ready is False
        # recovery cycle does not call the source
        assert monitor.step() == ActivityLabel.STABLE
        assert monitor.stream_ready is True
        assert monitor.step() == ActivityLabel.STANDING
        assert len(responses) == 1


class TestRun:
    def test_run_stops_on_event(self):
        stop = threading.Event()
        frames = [[_pose(x_offset=20 * i)] for i in range(5)]

        def source():
            poses = frames.pop(0)
            if not frames:
                stop.set()
            return poses

        monitor = ActivityMonitor(pose_source=source, interval_ms=0)
        monitor.run(stop)
        assert monitor.current_activity == ActivityLabel.MOVEMENT
        assert monitor.get_stats()['processed'] == 5

    def test_run_with_preset_event_does_nothing(self):
        stop = threading.Event()
        stop.set()
        monitor = ActivityMonitor(pose_source=lambda: [_pose()], interval_ms=0)
        monitor.run(stop)
        assert monitor.processed_count == 0
