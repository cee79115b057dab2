"""
Tests for Keypoint / Frame construction and validation.
"""

import numpy as np
import pytest

from engines.pose_activity.keypoints import (
    Frame, Keypoint, KEYPOINT_NAMES, REQUIRED_KEYPOINTS,
)


class TestFrameFromAny:
    def test_from_mapping(self):
        frame = Frame.from_any({
            'nose': {'x': 10, 'y': 20, 'score': 0.9},
            'left_wrist': (1, 2),
        })
        assert frame['nose'] == Keypoint('nose', 10.0, 20.0, 0.9)
        assert frame['left_wrist'].score == 1.0

    def test_from_named_list(self):
        frame = Frame.from_any([
            {'name': 'nose', 'x': 1, 'y': 2, 'score': 0.5},
            Keypoint('left_hip', 3, 4, 0.8),
        ])
        assert frame['nose'].x == 1.0
        assert frame['left_hip'].y == 4.0

    def test_missing_score_defaults_to_confident(self):
        frame = Frame.from_any({'nose': {'x': 1, 'y': 2}})
        assert frame['nose'].score == 1.0

    def test_none_entries_are_missing(self):
        frame = Frame.from_any({'nose': None, 'left_hip': (1, 2)})
        assert 'nose' not in frame
        assert len(frame) == 1

    def test_from_array(self):
        kps = np.zeros((17, 3))
        kps[KEYPOINT_NAMES['right_knee']] = [100, 200, 0.7]
        frame = Frame.from_any(kps)
        assert len(frame) == 17
        assert frame['right_knee'] == Keypoint('right_knee', 100.0, 200.0, 0.7)

    def test_bad_array_shape(self):
        with pytest.raises(ValueError):
            Frame.from_any(np.zeros((5, 3)))

    def test_unnamed_list_entry(self):
        with pytest.raises(ValueError):
            Frame.from_any([{'x': 1, 'y': 2}])

    def test_mapping_without_coordinate(self):
        with pytest.raises(ValueError):
            Frame.from_any({'nose': {'y': 2, 'score': 0.9}})

    def test_null_coordinate(self):
        with pytest.raises(ValueError):
            Frame.from_any({'nose': {'x': None, 'y': 2}})

    def test_non_numeric_coordinate(self):
        with pytest.raises(ValueError):
            Frame.from_any([{'name': 'nose', 'x': 'left', 'y': 2}])

    def test_unsupported_type(self):
        with pytest.raises(ValueError):
            Frame.from_any(42)

    def test_frame_passthrough(self):
        frame = Frame()
        assert Frame.from_any(frame) is frame


class TestFrameValidation:
    def _full(self, score=0.9):
        return Frame({name: Keypoint(name, 0, 0, score) for name in KEYPOINT_NAMES})

    def test_full_frame_is_usable(self):
        assert self._full().is_usable(REQUIRED_KEYPOINTS, 0.3)

    def test_missing_keypoint(self):
        frame = self._full()
        del frame.keypoints['right_ankle']
        assert frame.missing(REQUIRED_KEYPOINTS, 0.3) == ['right_ankle']

    def test_low_score_keypoint(self):
        frame = self._full()
        frame.keypoints['nose'] = Keypoint('nose', 0, 0, 0.1)
        assert not frame.is_usable(REQUIRED_KEYPOINTS, 0.3)

    def test_eyes_and_ears_not_required(self):
        frame = self._full()
        for name in ('left_eye', 'right_eye', 'left_ear', 'right_ear'):
            del frame.keypoints[name]
        assert frame.is_usable(REQUIRED_KEYPOINTS, 0.3)
