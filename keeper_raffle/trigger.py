"""
Round Trigger
Closes entries and asks the randomness oracle for a winning value
"""

import logging

from .errors import NotReady
from .events import RoundTriggered
from .interfaces import RandomnessOracle
from .state import RafflePhase

logger = logging.getLogger(__name__)


class RoundTrigger:
    """Moves the raffle from OPEN to CALCULATING"""

    def __init__(self, config, state, evaluator, oracle: RandomnessOracle, clock, consumer=None):
        self.config = config
        self.state = state
        self.evaluator = evaluator
        self.oracle = oracle
        self.clock = clock
        # identity the oracle delivers back to
        self.consumer = consumer

    def trigger_round(self):
        """
        Start winner selection for the current round

        Readiness is re-evaluated here regardless of who calls, so a
        premature or duplicate keeper call is refused without contacting
        the oracle. Must run inside the owner's unit of work: if the oracle
        request raises, the caller restores the pre-call state.

        Returns:
            RoundTriggered: event to emit once the trigger commits

        Raises:
            NotReady: readiness predicate is false
        """
        readiness = self.evaluator.snapshot()
        if not readiness.ready:
            raise NotReady(
                balance=readiness.balance,
                player_count=readiness.player_count,
                phase=readiness.phase,
                elapsed=readiness.elapsed,
            )

        self.state.phase = RafflePhase.CALCULATING

        config = self.config
        request_id = self.oracle.request_random_words(
            config.key_hash,
            config.subscription_id,
            config.request_confirmations,
            config.callback_gas_limit,
            config.num_words,
            consumer=self.consumer,
        )

        self.state.outstanding_request_id = request_id
        self.state.requested_at = self.clock()

        logger.info(
            f"🎲 Requested randomness for round with {readiness.player_count} players "
            f"(pool: {readiness.balance}, request: {request_id})"
        )
        return RoundTriggered(request_id=request_id)
