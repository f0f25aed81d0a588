"""
Temporal smoothing of gesture detections into scene state.
"""
import dataclasses
from typing import Optional

from .config import SmoothingConfig
from .types import DetectionResult, GestureLabel, SceneState


class RotationSmoother:
    """
    Folds per-frame detections into a smoothed scene state.
    
    Landmark estimates jitter from frame to frame, so the rotation follows
    the open palm through an exponential moving average and relaxes towards
    zero whenever no usable signal is present:
    
    - CLOSED_FIST: explode the scene, rotation untouched
    - OPEN_PALM: restore the scene and blend the hand position into rotation
    - VICTORY: twinkle, restore the scene and decay rotation
    - NONE or no detection: decay rotation only
    """
    
    def __init__(self, cfg: SmoothingConfig, state: Optional[SceneState] = None):
        self.palm_blend = cfg.palm_blend
        self.decay = cfg.decay
        self.state = state or SceneState()
    
    def update(self, detection: Optional[DetectionResult]) -> SceneState:
        """
        Apply one frame's detection.
        
        Args:
            detection: Detection for this frame, None if no hand or stale frame
            
        Returns:
            The new scene state
        """
        state = self.state
        gesture = detection.gesture if detection is not None else GestureLabel.NONE
        
        if gesture is GestureLabel.CLOSED_FIST:
            state = dataclasses.replace(state, exploded=True, twinkling=False)
        elif gesture is GestureLabel.OPEN_PALM:
            rotation = state.rotation * (1.0 - self.palm_blend) + detection.x * self.palm_blend
            state = dataclasses.replace(state, rotation=rotation, exploded=False, twinkling=False)
        elif gesture is GestureLabel.VICTORY:
            state = dataclasses.replace(
                state, rotation=state.rotation * self.decay, exploded=False, twinkling=True
            )
        else:
            state = dataclasses.replace(state, rotation=state.rotation * self.decay)
        
        self.state = state
        return state
    
    def reset(self) -> SceneState:
        self.state = SceneState()
        return self.state
