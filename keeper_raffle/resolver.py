"""
Winner Resolver
Consumes an oracle delivery, picks the winner and pays out the pool
"""

import logging

from .errors import InvalidRandomness, PayoutFailed, UnknownRequest
from .events import WinnerPicked
from .state import RafflePhase

logger = logging.getLogger(__name__)


class WinnerResolver:
    """Completes a round: CALCULATING back to OPEN"""

    def __init__(self, state, payout, clock):
        self.state = state
        self.payout = payout
        self.clock = clock

    def resolve(self, request_id, random_values, before_payout=None):
        """
        Select and pay the winner for the outstanding request

        Entrants are indexed in entry order; the winner is entrant
        `random_values[0] % number_of_players`. The round is reset before
        the transfer is attempted; if the transfer fails the reset is
        undone, so the round stays in CALCULATING and the same request can
        be delivered again.

        Args:
            request_id: Identifier returned by the oracle at trigger time
            random_values: Oracle output, only the first value is used
            before_payout: Optional callable run with the WinnerPicked event
                after the reset and before the transfer; the owner writes the
                new state and the draw record here, so nothing is left to
                write once money has moved

        Returns:
            WinnerPicked: event to emit once the resolve commits

        Raises:
            UnknownRequest: no round is waiting on `request_id`
            InvalidRandomness: empty delivery
            PayoutFailed: the winner could not be paid
        """
        state = self.state
        if (
            state.phase != RafflePhase.CALCULATING
            or state.outstanding_request_id is None
            or request_id != state.outstanding_request_id
        ):
            raise UnknownRequest(request_id, state.outstanding_request_id)
        if not random_values:
            raise InvalidRandomness(request_id)

        random_value = random_values[0]
        player_count = len(state.players)
        winner_index = random_value % player_count
        winner = state.players[winner_index]
        prize = state.pool_balance

        logger.info(f"🎲 Resolving request {request_id}: index {winner_index} of {player_count} players")

        event = WinnerPicked(
            winner=winner,
            request_id=request_id,
            winner_index=winner_index,
            random_value=random_value,
            prize=prize,
            player_count=player_count,
        )

        before = state.snapshot()
        state.recent_winner = winner
        state.players.clear()
        state.pool_balance = 0
        state.last_timestamp = self.clock()
        state.phase = RafflePhase.OPEN
        state.outstanding_request_id = None
        state.requested_at = None

        try:
            if before_payout is not None:
                before_payout(event)
            self._pay(winner, prize)
        except Exception:
            state.restore(before)
            raise

        logger.info(f"🎉 Winner: {winner} ({prize} paid, {player_count} entries)")
        return event

    def _pay(self, winner, prize):
        try:
            paid = self.payout.transfer(winner, prize)
        except Exception as e:
            logger.error(f"❌ Payout of {prize} to {winner} raised: {e}")
            raise PayoutFailed(winner, prize, reason=str(e)) from e

        if not paid:
            logger.error(f"❌ Payout of {prize} to {winner} was rejected")
            raise PayoutFailed(winner, prize)
