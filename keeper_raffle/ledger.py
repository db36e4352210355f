"""
Entry Ledger
Records participants and pooled payments for the current round
"""

import logging

from .errors import IndexOutOfRange, InsufficientEntry, RoundInProgress
from .events import EntryRecorded
from .state import RafflePhase

logger = logging.getLogger(__name__)


class EntryLedger:
    """Appends entries to the shared raffle state"""

    def __init__(self, config, state):
        self.config = config
        self.state = state

    def enter(self, participant, amount):
        """
        Enter the current round

        Each call is one entry; the same participant may enter repeatedly.
        Anything paid above the entrance fee stays in the pool.

        Args:
            participant: Participant identifier (address, user id, ...)
            amount: Payment in the smallest currency unit

        Returns:
            EntryRecorded: event to emit once the entry commits

        Raises:
            InsufficientEntry: amount below the entrance fee
            RoundInProgress: a winner is being calculated
        """
        if amount < self.config.entrance_fee:
            raise InsufficientEntry(amount, self.config.entrance_fee)
        if self.state.phase != RafflePhase.OPEN:
            raise RoundInProgress(self.state.phase)

        # players and pool move together
        self.state.players.append(participant)
        self.state.pool_balance += amount

        logger.debug(f"Entry #{len(self.state.players)} from {participant} ({amount})")
        return EntryRecorded(participant=participant, amount=amount)

    def get_player(self, index):
        """Participant at entry position `index`"""
        players = self.state.players
        if index < 0 or index >= len(players):
            raise IndexOutOfRange(index, len(players))
        return players[index]

    @property
    def player_count(self):
        return len(self.state.players)
