"""
Mock scene implementation for testing gesture-driven scene updates.
"""
import logging
from typing import Optional

from .types import SceneState

logger = logging.getLogger(__name__)


class MockScene:
    """Mock render layer that logs mode switches instead of drawing them."""
    
    def __init__(self):
        """Initialize the mock scene."""
        self.last_state: Optional[SceneState] = None
        self.render_count = 0
        self.explode_count = 0
        self.twinkle_count = 0
    
    async def render(self, state: SceneState) -> None:
        """Record the state and log explode/twinkle transitions."""
        previous = self.last_state or SceneState()
        self.render_count += 1
        
        if state.exploded != previous.exploded:
            if state.exploded:
                self.explode_count += 1
            logger.info(f"[MockScene] {'Explode' if state.exploded else 'Restore'} tree "
                        f"(explodes: {self.explode_count})")
        
        if state.twinkling != previous.twinkling:
            if state.twinkling:
                self.twinkle_count += 1
            logger.info(f"[MockScene] Twinkle {'on' if state.twinkling else 'off'} "
                        f"(twinkles: {self.twinkle_count})")
        
        self.last_state = state
    
    def reset_counters(self) -> None:
        """Reset action counters for testing."""
        self.render_count = 0
        self.explode_count = 0
        self.twinkle_count = 0
