"""
Type definitions for hand gesture intent recognition.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Protocol, Sequence, runtime_checkable

import numpy as np


class Landmark(NamedTuple):
    """Normalized hand keypoint; x and y are in [0..1] image coordinates."""
    x: float
    y: float
    z: float = 0.0


# Anything indexable as (x, y[, z]) is accepted by the geometry helpers
HandPose = Sequence[Sequence[float]]


class GestureLabel(Enum):
    """Discrete hand shapes recognised by the classifier."""
    OPEN_PALM = "Open_Palm"
    VICTORY = "Victory"
    CLOSED_FIST = "Closed_Fist"
    NONE = "None"


class AppMode(Enum):
    """Scene view mode. Gesture control is only active in TREE mode."""
    TREE = "tree"
    FOCUS = "focus"
    ALBUM = "album"


@dataclass(frozen=True)
class DetectionResult:
    """Gesture and centered horizontal control signal for one frame."""
    x: float  # index fingertip, -1 (left edge) .. 1 (right edge)
    gesture: GestureLabel


@dataclass(frozen=True)
class SceneState:
    """Smoothed state consumed by the render layer."""
    rotation: float = 0.0
    exploded: bool = False
    twinkling: bool = False


@runtime_checkable
class LandmarkSourceProto(Protocol):
    """Protocol for per-frame hand landmark producers."""

    @property
    def available(self) -> bool:
        """Whether detection can run at all."""
        ...

    async def initialize(self) -> bool:
        """One-time setup of the detection model."""
        ...

    def detect(self, frame_bgr: np.ndarray, timestamp_ms: int) -> Optional[List[Landmark]]:
        """Return the landmarks of one hand, or None if no hand is visible."""
        ...

    def draw_landmarks(self, frame: np.ndarray, landmarks: HandPose) -> np.ndarray:
        """Draw a detected hand onto a frame."""
        ...

    def close(self) -> None:
        """Release the model."""
        ...


@runtime_checkable
class SceneProto(Protocol):
    """Abstract protocol for render layers driven by the scene state."""

    async def render(self, state: SceneState) -> None:
        """Apply the smoothed state to the scene."""
        ...
