"""
Main application for hand gesture control of the tree scene.
"""
import argparse
import asyncio
import logging
import time
from typing import Optional

import cv2

from .config import load_config
from .gestures import GestureProcessor
from .landmarks import HandLandmarkTracker, fingers_extended
from .scene_mock import MockScene
from .types import AppMode, DetectionResult, LandmarkSourceProto, SceneState

logger = logging.getLogger(__name__)

MODES = list(AppMode)


class GestureRecognitionApp:
    """Main application class for hand gesture control."""
    
    def __init__(self, config_path: Optional[str] = None, camera_index: Optional[int] = None,
                 show_window: bool = True):
        """Initialize the application with configuration."""
        self.config = load_config(config_path)
        if camera_index is not None:
            self.config.camera.index = camera_index
        self.show_window = show_window
        
        self.tracker: LandmarkSourceProto = HandLandmarkTracker(self.config.hand_landmarker)
        self.scene = MockScene()
        self.gesture_processor = GestureProcessor(self.config)
        self.mode = AppMode.TREE
        self.cap: Optional[cv2.VideoCapture] = None
    
    def _open_camera(self) -> bool:
        cam = self.config.camera
        self.cap = cv2.VideoCapture(cam.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, cam.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cam.height)
        self.cap.set(cv2.CAP_PROP_FPS, cam.fps)
        return self.cap.isOpened()
    
    def _frame_time(self) -> float:
        """Video time of the frame just read, in milliseconds."""
        pos_ms = self.cap.get(cv2.CAP_PROP_POS_MSEC)
        if pos_ms and pos_ms > 0:
            return pos_ms
        return time.monotonic() * 1000.0
    
    async def run(self):
        """Run the main application loop."""
        if not self._open_camera():
            logger.warning(f"Camera {self.config.camera.index} unavailable, gesture control disabled")
            return
        
        if not await self.tracker.initialize():
            print("⚠️  Hand detection unavailable, the tree will stay at rest")
        
        print(f"Starting {self.config.display.window_name}")
        print("🎄 Gesture Control:")
        print("  - Open Palm + Move Left/Right = Rotate")
        print("  - Closed Fist = Explode")
        print("  - Victory = Twinkle")
        print("Press 'm' to switch mode, 'r' to reset, 'q' to quit")
        
        try:
            while True:
                ret, frame = self.cap.read()
                if not ret:
                    print("Failed to read frame from camera")
                    break
                
                frame_time = self._frame_time()
                landmarks = None
                if not self.gesture_processor.detector.gate.is_stale(frame_time):
                    landmarks = self.tracker.detect(frame, int(time.monotonic() * 1000))
                
                detection, state = self.gesture_processor.process_frame(
                    landmarks=landmarks,
                    frame_time=frame_time,
                    mode=self.mode
                )
                await self.scene.render(state)
                
                if self.show_window:
                    self._draw(frame, landmarks, detection, state)
                    if not self._handle_key(cv2.waitKey(1) & 0xFF):
                        break
                
                await asyncio.sleep(0)
        finally:
            self.close()
    
    def _draw(self, frame, landmarks, detection: Optional[DetectionResult], state: SceneState) -> None:
        display = self.config.display
        
        if landmarks and display.show_landmarks:
            frame = self.tracker.draw_landmarks(frame, landmarks)
        
        if display.mirror:
            frame = cv2.flip(frame, 1)
        
        if display.show_hud:
            if landmarks:
                status_text = f"Hand: {fingers_extended(landmarks)} fingers"
            else:
                status_text = "No hand detected"
            gesture_text = f"Gesture: {detection.gesture.value}" if detection else "Gesture: -"
            state_text = (f"Rotation: {state.rotation:+.2f}  "
                          f"Exploded: {state.exploded}  Twinkle: {state.twinkling}")
            
            cv2.putText(frame, status_text, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
            cv2.putText(frame, gesture_text, (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
            cv2.putText(frame, state_text, (10, 90), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
            cv2.putText(frame, f"Mode: {self.mode.value}", (10, frame.shape[0] - 40),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
            cv2.putText(frame, "m = mode, r = reset, q = quit", (10, frame.shape[0] - 20),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
        
        cv2.imshow(display.window_name, frame)
    
    def _handle_key(self, key: int) -> bool:
        """Apply a key press; returns False when the app should stop."""
        if key in (ord('q'), 27):
            return False
        if key == ord('m'):
            self.mode = MODES[(MODES.index(self.mode) + 1) % len(MODES)]
            print(f"🔁 Mode: {self.mode.value}")
        elif key == ord('r'):
            self.gesture_processor.reset()
            print("🔄 Scene state reset")
        return True
    
    def close(self) -> None:
        """Cleanup resources."""
        if self.cap is not None and self.cap.isOpened():
            self.cap.release()
        self.tracker.close()
        if self.show_window:
            cv2.destroyAllWindows()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hand gesture control for the holiday tree scene")
    parser.add_argument("--config", default=None, help="Path to a YAML config file.")
    parser.add_argument("--camera", type=int, default=None, help="Override the camera index.")
    parser.add_argument("--no-window", action="store_true", help="Run without the preview window.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


async def main(argv=None):
    """Entry point for the application."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    
    app = GestureRecognitionApp(
        config_path=args.config,
        camera_index=args.camera,
        show_window=not args.no_window
    )
    await app.run()


def run():
    """Console script wrapper."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nApplication interrupted by user")


if __name__ == "__main__":
    run()
