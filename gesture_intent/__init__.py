"""
Holiday Tree Gesture Control

A Python service that reads webcam frames, detects hand landmarks using MediaPipe,
and turns hand gestures into rotate, explode and twinkle intents for the tree scene.
"""

__version__ = "0.1.0"

from .types import AppMode, DetectionResult, GestureLabel, Landmark, SceneProto, SceneState
from .config import load_config, Cfg
from .scene_mock import MockScene
from .landmarks import (
    HandLandmarkTracker,
    MalformedPoseError,
    fingers_extended,
    is_finger_extended,
    validate_pose,
)
from .gestures import (
    FrameGate,
    GestureDetector,
    GestureProcessor,
    classify_gesture,
    extract_signal,
    normalize_x,
)
from .smoothing import RotationSmoother

__all__ = [
    "AppMode",
    "DetectionResult",
    "GestureLabel",
    "Landmark",
    "SceneProto",
    "SceneState",
    "load_config",
    "Cfg",
    "MockScene",
    "HandLandmarkTracker",
    "MalformedPoseError",
    "fingers_extended",
    "is_finger_extended",
    "validate_pose",
    "FrameGate",
    "GestureDetector",
    "GestureProcessor",
    "classify_gesture",
    "extract_signal",
    "normalize_x",
    "RotationSmoother",
]
