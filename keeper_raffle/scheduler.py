"""
Keeper Scheduler
Polls the raffle's readiness check and performs upkeep when it is due
"""

import logging

from discord.ext import tasks

from .config import KEEPER_POLL_INTERVAL, STALE_ROUND_WARNING
from .errors import NotReady
from .state import RafflePhase

logger = logging.getLogger(__name__)


class KeeperScheduler:
    """Automation service driving an AutomationTarget"""

    def __init__(self, target, poll_seconds=KEEPER_POLL_INTERVAL, stale_after=STALE_ROUND_WARNING, clock=None):
        """
        Initialize keeper scheduler

        Args:
            target: AutomationTarget (usually a RaffleStateMachine)
            poll_seconds: Seconds between readiness checks
            stale_after: Warn when a round has waited this long for randomness
                (None disables the warning)
            clock: Time source for the stale check (default: the target's clock)
        """
        self.target = target
        self.poll_seconds = poll_seconds
        self.stale_after = stale_after
        self.clock = clock or getattr(target, 'clock', None)
        self.rounds_triggered = 0
        self._loop = None

        logger.info(f"⏰ Keeper scheduler initialized (every {poll_seconds}s)")

    def poll_once(self):
        """
        Run one keeper cycle

        Returns:
            bool: True if a round was triggered
        """
        upkeep_needed, perform_data = self.target.check_upkeep(b"")
        if not upkeep_needed:
            self._warn_if_stale()
            return False

        try:
            request_id = self.target.perform_upkeep(perform_data)
        except NotReady as e:
            # State moved between the check and the upkeep
            logger.info(f"Upkeep no longer needed: {e}")
            return False

        self.rounds_triggered += 1
        logger.info(f"🔔 Upkeep performed, randomness request {request_id}")
        return True

    def _warn_if_stale(self):
        if self.stale_after is None or self.clock is None:
            return
        if getattr(self.target, 'raffle_state', None) != RafflePhase.CALCULATING:
            return

        requested_at = getattr(self.target, 'requested_at', None)
        if requested_at is None:
            return

        waiting = self.clock() - requested_at
        if waiting > self.stale_after:
            logger.warning(
                f"⚠️ Round has waited {waiting:.0f}s for randomness "
                f"(request {self.target.outstanding_request_id}); no delivery yet"
            )

    async def _tick(self):
        try:
            self.poll_once()
        except Exception as e:
            logger.error(f"Error in keeper poll: {e}", exc_info=True)

    def start(self):
        """
        Start polling as a background task on the running event loop

        Returns:
            discord.ext.tasks.Loop
        """
        if self._loop is not None and self._loop.is_running():
            return self._loop

        self._loop = tasks.loop(seconds=self.poll_seconds)(self._tick)
        self._loop.start()
        logger.info(f"✅ Keeper task started (checks every {self.poll_seconds}s)")
        return self._loop

    def stop(self):
        if self._loop is not None:
            self._loop.cancel()
            logger.info("Keeper task stopped")

    @property
    def running(self):
        return self._loop is not None and self._loop.is_running()
