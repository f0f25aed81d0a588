"""
Gesture classification classes that convert hand landmarks into scene intents.
"""
import logging
from typing import Optional, Tuple

from .config import Cfg
from .landmarks import INDEX_TIP, MalformedPoseError, finger_states, validate_pose
from .smoothing import RotationSmoother
from .types import AppMode, DetectionResult, GestureLabel, HandPose, SceneState

logger = logging.getLogger(__name__)

OPEN_PALM_MIN_FINGERS = 3


def classify_gesture(landmarks: HandPose) -> GestureLabel:
    """
    Classify a hand pose from its four non-thumb fingers.
    
    The thumb is ignored; its tip/PIP geometry is unreliable across hand
    orientations. Rules are checked in order and the first match wins:
    
    - index and middle extended, ring and pinky curled: VICTORY
    - three or more fingers extended: OPEN_PALM
    - no finger extended: CLOSED_FIST
    - anything else: NONE
    
    Args:
        landmarks: List of 21 hand landmarks
        
    Returns:
        The gesture label for this pose
        
    Raises:
        MalformedPoseError: if the pose is incomplete
    """
    validate_pose(landmarks)
    
    states = finger_states(landmarks)
    extended_count = sum(states.values())
    
    if states["index"] and states["middle"] and not states["ring"] and not states["pinky"]:
        return GestureLabel.VICTORY
    
    if extended_count >= OPEN_PALM_MIN_FINGERS:
        return GestureLabel.OPEN_PALM
    
    if extended_count == 0:
        return GestureLabel.CLOSED_FIST
    
    return GestureLabel.NONE


def normalize_x(x: float) -> float:
    """Map an image x in [0..1] to [-1..1] with the image center at 0."""
    return (x - 0.5) * 2


def extract_signal(landmarks: HandPose) -> float:
    """
    Horizontal control signal from the index fingertip.
    
    Args:
        landmarks: List of 21 hand landmarks
        
    Returns:
        -1 at the left image edge, 0 at the center, 1 at the right edge
    """
    return normalize_x(landmarks[INDEX_TIP][0])


class FrameGate:
    """
    Skips video frames that were already processed.
    
    The render loop usually runs faster than the camera, so the same video
    frame is offered several times.
    """
    
    def __init__(self):
        self.last_frame_time: Optional[float] = None
    
    def is_stale(self, frame_time: float) -> bool:
        """True if this frame time was the last one processed."""
        return frame_time == self.last_frame_time
    
    def should_process(self, frame_time: float) -> bool:
        """Return False for a repeated frame time, otherwise record it."""
        if self.is_stale(frame_time):
            return False
        self.last_frame_time = frame_time
        return True
    
    def reset(self) -> None:
        self.last_frame_time = None


class GestureDetector:
    """
    Per-frame tick turning a landmark estimate into a detection result.
    """
    
    def __init__(self):
        self.gate = FrameGate()
    
    def on_frame(self, landmarks: Optional[HandPose], frame_time: float) -> Optional[DetectionResult]:
        """
        Process one video frame.
        
        Args:
            landmarks: Hand landmarks (None if no hand detected)
            frame_time: Time of the video frame the landmarks belong to
            
        Returns:
            DetectionResult, or None for a stale frame, no hand or a malformed pose
        """
        if not self.gate.should_process(frame_time):
            return None
        
        if landmarks is None:
            return None
        
        try:
            gesture = classify_gesture(landmarks)
        except MalformedPoseError as e:
            logger.debug(f"Ignoring malformed pose: {e}")
            return None
        
        return DetectionResult(x=extract_signal(landmarks), gesture=gesture)


class GestureProcessor:
    """
    Main gesture processor that coordinates detection and smoothing.
    """
    
    def __init__(self, cfg: Cfg):
        """Initialize gesture processor with configuration."""
        self.cfg = cfg
        self.detector = GestureDetector()
        self.smoother = RotationSmoother(cfg.smoothing)
    
    @property
    def state(self) -> SceneState:
        return self.smoother.state
    
    def process_frame(self, landmarks: Optional[HandPose], frame_time: float,
                      mode: AppMode = AppMode.TREE) -> Tuple[Optional[DetectionResult], SceneState]:
        """
        Process a frame and return the detection and the updated scene state.
        
        Args:
            landmarks: Hand landmarks (None if no hand detected)
            frame_time: Time of the video frame the landmarks belong to
            mode: Current scene mode; gestures only drive the tree view
            
        Returns:
            Tuple of (detection, scene_state)
        """
        if mode is not AppMode.TREE:
            return None, self.smoother.state
        
        detection = self.detector.on_frame(landmarks, frame_time)
        return detection, self.smoother.update(detection)
    
    def reset(self) -> None:
        """Forget the smoothed state and the last processed frame."""
        self.detector.gate.reset()
        self.smoother.reset()
