"""
Configuration management for hand gesture intent recognition.
"""
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int
    width: int
    height: int
    fps: int


@dataclass
class HandLandmarkerConfig:
    """MediaPipe HandLandmarker configuration settings."""
    model_asset_path: str
    model_url: str
    delegate: str  # "GPU" or "CPU"
    num_hands: int
    min_hand_detection_confidence: float
    min_hand_presence_confidence: float
    min_tracking_confidence: float


@dataclass
class SmoothingConfig:
    """Rotation smoothing and decay settings."""
    palm_blend: float  # weight of the new signal on open palm frames
    decay: float  # per-frame rotation factor when no signal is applied


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool
    show_hud: bool
    mirror: bool
    window_name: str


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig
    hand_landmarker: HandLandmarkerConfig
    smoothing: SmoothingConfig
    display: DisplayConfig


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.
    
    Args:
        path: Path to config file. If None, uses the bundled config.default.yaml
        
    Returns:
        Configuration object with all settings
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)
    
    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    camera_data = data['camera']
    camera = CameraConfig(
        index=camera_data['index'],
        width=camera_data['width'],
        height=camera_data['height'],
        fps=camera_data['fps']
    )
    
    hl_data = data['hand_landmarker']
    hand_landmarker = HandLandmarkerConfig(
        model_asset_path=hl_data['model_asset_path'],
        model_url=hl_data['model_url'],
        delegate=str(hl_data.get('delegate', 'GPU')).upper(),
        num_hands=hl_data.get('num_hands', 1),
        min_hand_detection_confidence=hl_data['min_hand_detection_confidence'],
        min_hand_presence_confidence=hl_data['min_hand_presence_confidence'],
        min_tracking_confidence=hl_data['min_tracking_confidence']
    )
    
    smoothing_data = data['smoothing']
    smoothing = SmoothingConfig(
        palm_blend=float(smoothing_data['palm_blend']),
        decay=float(smoothing_data['decay'])
    )
    _validate_smoothing(smoothing)
    
    display_data = data['display']
    display = DisplayConfig(
        show_landmarks=display_data['show_landmarks'],
        show_hud=display_data['show_hud'],
        mirror=display_data.get('mirror', True),
        window_name=display_data['window_name']
    )
    
    return Cfg(
        camera=camera,
        hand_landmarker=hand_landmarker,
        smoothing=smoothing,
        display=display
    )


def _validate_smoothing(smoothing: SmoothingConfig) -> None:
    """Reject factors that would let the rotation grow without bound."""
    if not 0.0 < smoothing.palm_blend <= 1.0:
        raise ValueError(f"smoothing.palm_blend must be in (0, 1], got {smoothing.palm_blend}")
    if not 0.0 <= smoothing.decay < 1.0:
        raise ValueError(f"smoothing.decay must be in [0, 1), got {smoothing.decay}")
