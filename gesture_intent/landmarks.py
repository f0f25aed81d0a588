"""
Hand landmark detection using MediaPipe and finger geometry helpers.
"""
import asyncio
import logging
import math
from pathlib import Path
from typing import Optional, List

import cv2
import mediapipe as mp
import numpy as np
import requests
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from .config import HandLandmarkerConfig
from .types import HandPose, Landmark

logger = logging.getLogger(__name__)

NUM_LANDMARKS = 21
WRIST = 0
INDEX_TIP = 8

# Non-thumb fingers as (tip, pip) landmark indices
FINGER_JOINTS = {
    "index": (8, 6),
    "middle": (12, 10),
    "ring": (16, 14),
    "pinky": (20, 18),
}


class MalformedPoseError(ValueError):
    """Raised when a hand pose cannot be classified safely."""


class HandLandmarkTracker:
    """Hand landmark source backed by the MediaPipe Tasks HandLandmarker."""
    
    def __init__(self, cfg: HandLandmarkerConfig):
        """
        Create an uninitialised tracker.
        
        Args:
            cfg: HandLandmarker settings (model asset, delegate, confidences)
        """
        self.cfg = cfg
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._last_timestamp_ms = -1
    
    @property
    def available(self) -> bool:
        """True once the model has been loaded successfully."""
        return self._landmarker is not None
    
    async def initialize(self) -> bool:
        """
        Load the hand landmark model.
        
        Any failure leaves hand detection permanently disabled instead of
        propagating to the caller.
        
        Returns:
            True if the tracker is ready for detection
        """
        try:
            model_path = await asyncio.to_thread(self._ensure_model_asset)
            self._landmarker = await asyncio.to_thread(self._create_landmarker, model_path)
        except Exception as e:
            logger.error(f"Failed to init hand landmarker: {e}")
            self._landmarker = None
            return False
        
        logger.info(f"✅ Hand landmarker ready ({self.cfg.delegate} delegate)")
        return True
    
    def _ensure_model_asset(self) -> Path:
        """Download the model bundle if it is not cached locally yet."""
        model_path = Path(self.cfg.model_asset_path).expanduser()
        if model_path.exists():
            return model_path
        
        logger.info(f"📦 Downloading hand landmarker model to {model_path}")
        response = requests.get(self.cfg.model_url, timeout=30)
        response.raise_for_status()
        model_path.parent.mkdir(parents=True, exist_ok=True)
        model_path.write_bytes(response.content)
        return model_path
    
    def _create_landmarker(self, model_path: Path) -> vision.HandLandmarker:
        delegate = (
            mp_tasks.BaseOptions.Delegate.GPU
            if self.cfg.delegate == "GPU"
            else mp_tasks.BaseOptions.Delegate.CPU
        )
        options = vision.HandLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(
                model_asset_path=str(model_path),
                delegate=delegate
            ),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=self.cfg.num_hands,
            min_hand_detection_confidence=self.cfg.min_hand_detection_confidence,
            min_hand_presence_confidence=self.cfg.min_hand_presence_confidence,
            min_tracking_confidence=self.cfg.min_tracking_confidence
        )
        return vision.HandLandmarker.create_from_options(options)
    
    def detect(self, frame_bgr: np.ndarray, timestamp_ms: int) -> Optional[List[Landmark]]:
        """
        Run the landmark model on one video frame.
        
        Args:
            frame_bgr: Input frame in BGR format
            timestamp_ms: Monotonic frame timestamp in milliseconds
            
        Returns:
            List of 21 landmarks in [0..1] range for the first hand, or None
        """
        if self._landmarker is None:
            return None
        
        # VIDEO mode rejects timestamps that do not increase
        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms
        
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect_for_video(image, timestamp_ms)
        
        if not result.hand_landmarks:
            return None
        
        return [Landmark(lm.x, lm.y, lm.z) for lm in result.hand_landmarks[0]]
    
    def close(self) -> None:
        """Release the underlying model."""
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
    
    def draw_landmarks(self, frame: np.ndarray, landmarks: HandPose) -> np.ndarray:
        """
        Draw hand landmarks on the frame.
        
        Args:
            frame: Input frame
            landmarks: Hand landmarks in [0..1] range
            
        Returns:
            Frame with landmarks drawn
        """
        height, width = frame.shape[:2]
        points = [(int(lm[0] * width), int(lm[1] * height)) for lm in landmarks]
        
        for connection in vision.HandLandmarksConnections.HAND_CONNECTIONS:
            if connection.end < len(points):
                cv2.line(frame, points[connection.start], points[connection.end], (200, 200, 200), 1)
        
        for i, (px, py) in enumerate(points):
            color = (0, 215, 255) if i == INDEX_TIP else (0, 255, 0)
            cv2.circle(frame, (px, py), 3, color, -1)
        
        return frame


def validate_pose(landmarks: HandPose) -> None:
    """
    Check that a pose can be classified.
    
    Raises:
        MalformedPoseError: fewer than 21 landmarks, or a landmark the
            classifier reads has no x/y pair
    """
    if landmarks is None or len(landmarks) < NUM_LANDMARKS:
        count = 0 if landmarks is None else len(landmarks)
        raise MalformedPoseError(f"Expected {NUM_LANDMARKS} landmarks, got {count}")
    
    required = {WRIST, INDEX_TIP}
    for tip, pip in FINGER_JOINTS.values():
        required.update((tip, pip))
    
    for idx in sorted(required):
        point = landmarks[idx]
        try:
            has_xy = point is not None and len(point) >= 2
        except TypeError:
            has_xy = False
        if not has_xy:
            raise MalformedPoseError(f"Landmark {idx} has no x/y coordinates")


def is_finger_extended(landmarks: HandPose, tip_idx: int, pip_idx: int, wrist_idx: int = WRIST) -> bool:
    """
    Check whether a finger is extended.
    
    A curled finger folds its tip back towards the wrist, so the tip ends up
    closer to the wrist than the finger's own PIP joint. Only relative 2D
    distances are used, which keeps the test independent of hand rotation.
    
    Args:
        landmarks: List of 21 hand landmarks
        tip_idx: Fingertip landmark index
        pip_idx: PIP joint landmark index
        wrist_idx: Reference landmark index
        
    Returns:
        True if the tip is farther from the wrist than the PIP joint
    """
    wrist = landmarks[wrist_idx]
    tip = landmarks[tip_idx]
    pip = landmarks[pip_idx]
    
    d_tip = math.hypot(tip[0] - wrist[0], tip[1] - wrist[1])
    d_pip = math.hypot(pip[0] - wrist[0], pip[1] - wrist[1])
    
    return d_tip > d_pip


def finger_states(landmarks: HandPose) -> dict:
    """Map each non-thumb finger name to its extension state."""
    return {
        name: is_finger_extended(landmarks, tip, pip)
        for name, (tip, pip) in FINGER_JOINTS.items()
    }


def fingers_extended(landmarks: HandPose) -> int:
    """
    Count the number of extended non-thumb fingers.
    
    Args:
        landmarks: List of 21 hand landmarks
        
    Returns:
        Number of extended fingers (0-4)
    """
    return sum(finger_states(landmarks).values())
