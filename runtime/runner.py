import asyncio
import logging
from typing import List, Optional
from engine.engine import ReplayEngine
from engine.model import BattleState, Event
from .config import DEFAULT_ROUND_INTERVAL_S, clamp_interval
from .eventlog import EventLog

logger = logging.getLogger(__name__)

class PlaybackController:
    """Forward/backward stepping and timed auto-play over a ReplayEngine.

    All calls are expected on one event loop. Auto-play is a task that steps,
    sleeps, and re-checks `is_auto_playing` on wake; a step is synchronous, so
    turning auto-play off never interrupts a round half-way.
    """

    def __init__(self, engine: ReplayEngine, round_interval_s: float = DEFAULT_ROUND_INTERVAL_S):
        self.engine = engine
        self.round_interval_s = clamp_interval(round_interval_s)
        self.events = EventLog()
        self.is_auto_playing = False
        self._task: asyncio.Task | None = None

    @property
    def round_index(self) -> int:
        return self.engine.round_index

    @property
    def total_rounds(self) -> int:
        return self.engine.total_rounds

    @property
    def can_step_forward(self) -> bool:
        return not self.is_auto_playing and self.round_index < self.total_rounds

    @property
    def can_step_backward(self) -> bool:
        return not self.is_auto_playing and self.round_index > 0

    def snapshot(self) -> BattleState:
        """Get the live battle state."""
        return self.engine.state

    def step_forward(self) -> bool:
        """Advance one round. Returns False if nothing happened."""
        if self.is_auto_playing:
            logger.warning("[Playback] Manual step ignored while auto-play is running")
            return False
        return self._advance()

    def step_backward(self) -> bool:
        """Rewind one round from its snapshot. Returns False if nothing happened."""
        if self.is_auto_playing:
            logger.warning("[Playback] Manual step ignored while auto-play is running")
            return False
        if self.round_index <= 0:
            return False
        self.events.append_many(self.engine.restore_round(self.round_index - 1))
        return True

    def skip_to_end(self) -> bool:
        """Process all remaining rounds at once."""
        if self.is_auto_playing or self.engine.at_end:
            return False
        evts: List[Event] = self.engine.run_to_end()
        self.events.append_many(evts)
        return True

    def _advance(self) -> bool:
        if self.engine.at_end:
            return False
        evts: List[Event] = self.engine.advance_one_round()
        self.events.append_many(evts)
        return True

    async def toggle_auto_play(self, interval_s: Optional[float] = None) -> bool:
        """Flip auto-play and return the new state."""
        if interval_s is not None:
            self.set_round_interval(interval_s)
        if self.is_auto_playing:
            await self.stop()
            logger.info(f"[Playback] Auto-play stopped at round index {self.round_index}")
            return False
        if self.engine.at_end:
            logger.info("[Playback] Auto-play not started: already at the final round")
            return False
        self.is_auto_playing = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"[Playback] Auto-play started (interval {self.round_interval_s:.2f}s)")
        return True

    async def _loop(self):
        """Step, then sleep, until switched off or the replay ends."""
        while self.is_auto_playing and not self.engine.at_end:
            self._advance()
            if self.engine.at_end:
                break
            await asyncio.sleep(self.round_interval_s)
        self.is_auto_playing = False
        logger.info(f"[Playback] Auto-play finished at round index {self.round_index}")

    async def stop(self):
        """Stop auto-play; a round already being applied completes first."""
        self.is_auto_playing = False
        task, self._task = self._task, None
        if not task:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def join(self):
        """Wait for a running auto-play to finish on its own."""
        if self._task:
            await self._task
            self._task = None

    def set_round_interval(self, interval_s: float):
        """Update the auto-play interval in seconds (clamped)."""
        self.round_interval_s = clamp_interval(interval_s)
        logger.info(f"[Playback] Round interval set to {self.round_interval_s:.2f}s")
