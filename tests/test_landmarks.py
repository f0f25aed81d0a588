"""
Test cases for finger geometry, pose validation and the landmark tracker.
"""
import dataclasses
import tempfile
import unittest
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

import numpy as np
import requests

# Add project root and test helpers to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from gesture_intent.config import load_config
from gesture_intent.landmarks import (
    HandLandmarkTracker, MalformedPoseError, fingers_extended, is_finger_extended, validate_pose
)
from gesture_intent.types import Landmark, LandmarkSourceProto
from pose_factory import closed_fist, make_pose, open_palm


class TestFingerExtension(unittest.TestCase):
    """Test the wrist-distance extension heuristic."""
    
    def test_tip_beyond_pip_is_extended(self):
        pose = [(0.5, 0.9), (0.5, 0.5), (0.5, 0.7)]
        self.assertTrue(is_finger_extended(pose, tip_idx=1, pip_idx=2, wrist_idx=0))
    
    def test_tip_folded_towards_wrist_is_curled(self):
        pose = [(0.5, 0.9), (0.5, 0.8), (0.5, 0.7)]
        self.assertFalse(is_finger_extended(pose, tip_idx=1, pip_idx=2, wrist_idx=0))
    
    def test_equal_distance_is_not_extended(self):
        pose = [(0.5, 0.5), (0.7, 0.5), (0.5, 0.7)]
        self.assertFalse(is_finger_extended(pose, tip_idx=1, pip_idx=2, wrist_idx=0))
    
    def test_rotated_hand(self):
        """A hand pointing sideways is judged the same as an upright one."""
        pose = [(0.1, 0.5), (0.6, 0.52), (0.3, 0.5)]
        self.assertTrue(is_finger_extended(pose, tip_idx=1, pip_idx=2, wrist_idx=0))
    
    def test_z_is_ignored(self):
        pose = [Landmark(0.5, 0.9, 0.0), Landmark(0.5, 0.8, -5.0), Landmark(0.5, 0.7, 5.0)]
        self.assertFalse(is_finger_extended(pose, tip_idx=1, pip_idx=2, wrist_idx=0))
    
    def test_fingers_extended_count(self):
        self.assertEqual(fingers_extended(open_palm()), 4)
        self.assertEqual(fingers_extended(closed_fist()), 0)
        self.assertEqual(fingers_extended(make_pose(index=True, pinky=True)), 2)


class TestValidatePose(unittest.TestCase):
    """Test malformed pose detection."""
    
    def test_full_pose_is_valid(self):
        validate_pose(open_palm())
    
    def test_short_pose_is_rejected(self):
        with self.assertRaises(MalformedPoseError):
            validate_pose(open_palm()[:15])
    
    def test_empty_and_missing_pose_are_rejected(self):
        with self.assertRaises(MalformedPoseError):
            validate_pose([])
        with self.assertRaises(MalformedPoseError):
            validate_pose(None)
    
    def test_missing_referenced_landmark_is_rejected(self):
        pose = open_palm()
        pose[18] = None
        with self.assertRaises(MalformedPoseError):
            validate_pose(pose)
    
    def test_scalar_landmark_is_rejected(self):
        pose = open_palm()
        pose[6] = 0.7
        with self.assertRaises(MalformedPoseError):
            validate_pose(pose)
    
    def test_unreferenced_landmark_is_not_checked(self):
        pose = open_palm()
        pose[4] = None
        validate_pose(pose)


class TestHandLandmarkTracker(unittest.IsolatedAsyncioTestCase):
    """Test tracker setup and per-frame detection with MediaPipe stubbed out."""
    
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        model_path = Path(self.tmp.name) / "hand_landmarker.task"
        model_path.write_bytes(b"model")
        self.cfg = dataclasses.replace(
            load_config().hand_landmarker, model_asset_path=str(model_path)
        )
        self.frame = np.zeros((48, 64, 3), dtype=np.uint8)
    
    def tearDown(self):
        self.tmp.cleanup()
    
    def test_implements_landmark_source(self):
        self.assertIsInstance(HandLandmarkTracker(self.cfg), LandmarkSourceProto)
    
    async def test_initialize_failure_disables_detection(self):
        tracker = HandLandmarkTracker(self.cfg)
        with mock.patch(
            "gesture_intent.landmarks.vision.HandLandmarker.create_from_options",
            side_effect=RuntimeError("no GPU"),
        ):
            with self.assertLogs("gesture_intent.landmarks", level="ERROR"):
                ok = await tracker.initialize()
        
        self.assertFalse(ok)
        self.assertFalse(tracker.available)
        self.assertIsNone(tracker.detect(self.frame, 1))
    
    async def test_model_download_failure_disables_detection(self):
        cfg = dataclasses.replace(
            self.cfg, model_asset_path=str(Path(self.tmp.name) / "missing" / "model.task")
        )
        tracker = HandLandmarkTracker(cfg)
        with mock.patch(
            "gesture_intent.landmarks.requests.get",
            side_effect=requests.ConnectionError("offline"),
        ):
            with self.assertLogs("gesture_intent.landmarks", level="ERROR"):
                ok = await tracker.initialize()
        
        self.assertFalse(ok)
        self.assertFalse(tracker.available)
    
    async def test_model_is_downloaded_when_missing(self):
        model_path = Path(self.tmp.name) / "cache" / "model.task"
        cfg = dataclasses.replace(self.cfg, model_asset_path=str(model_path))
        tracker = HandLandmarkTracker(cfg)
        response = mock.Mock(content=b"task-bundle")
        
        with mock.patch("gesture_intent.landmarks.requests.get", return_value=response) as get, \
                mock.patch("gesture_intent.landmarks.vision.HandLandmarker.create_from_options") as create:
            ok = await tracker.initialize()
        
        self.assertTrue(ok)
        self.assertTrue(tracker.available)
        get.assert_called_once_with(cfg.model_url, timeout=30)
        self.assertEqual(model_path.read_bytes(), b"task-bundle")
        create.assert_called_once()
    
    def _tracker_with_stub(self, hand_landmarks):
        tracker = HandLandmarkTracker(self.cfg)
        landmarker = mock.Mock()
        landmarker.detect_for_video.return_value = SimpleNamespace(hand_landmarks=hand_landmarks)
        tracker._landmarker = landmarker
        return tracker, landmarker
    
    def test_detect_returns_first_hand(self):
        hand = [SimpleNamespace(x=i / 21, y=0.5, z=0.0) for i in range(21)]
        tracker, _ = self._tracker_with_stub([hand])
        
        landmarks = tracker.detect(self.frame, 100)
        
        self.assertEqual(len(landmarks), 21)
        self.assertEqual(landmarks[8], Landmark(8 / 21, 0.5, 0.0))
    
    def test_detect_without_hand_returns_none(self):
        tracker, _ = self._tracker_with_stub([])
        self.assertIsNone(tracker.detect(self.frame, 100))
    
    def test_detect_keeps_timestamps_increasing(self):
        tracker, landmarker = self._tracker_with_stub([])
        tracker.detect(self.frame, 100)
        tracker.detect(self.frame, 100)
        tracker.detect(self.frame, 50)
        
        timestamps = [c.args[1] for c in landmarker.detect_for_video.call_args_list]
        self.assertEqual(timestamps, [100, 101, 102])
    
    def test_draw_landmarks_marks_frame(self):
        tracker = HandLandmarkTracker(self.cfg)
        frame = np.zeros((120, 160, 3), dtype=np.uint8)
        drawn = tracker.draw_landmarks(frame, open_palm())
        self.assertGreater(int(drawn.sum()), 0)
        self.assertEqual(drawn.shape, (120, 160, 3))
    
    def test_close_releases_model(self):
        tracker, landmarker = self._tracker_with_stub([])
        tracker.close()
        landmarker.close.assert_called_once()
        self.assertFalse(tracker.available)


if __name__ == '__main__':
    unittest.main()
