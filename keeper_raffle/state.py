"""
Raffle State
The single mutable record owned by a RaffleStateMachine
"""

from dataclasses import dataclass, field, fields, replace
from enum import IntEnum


class RafflePhase(IntEnum):
    OPEN = 0
    CALCULATING = 1


@dataclass
class RaffleState:
    """Current round: phase, entrants, pool and last winner"""

    last_timestamp: float
    phase: RafflePhase = RafflePhase.OPEN
    players: list = field(default_factory=list)
    pool_balance: int = 0
    recent_winner: object = None
    outstanding_request_id: object = None
    requested_at: float = None

    def snapshot(self):
        """Detached copy used to roll back a failed unit of work"""
        return replace(self, players=list(self.players))

    def restore(self, snapshot):
        """Overwrite every field in place from a snapshot"""
        for f in fields(self):
            value = getattr(snapshot, f.name)
            if f.name == "players":
                value = list(value)
            setattr(self, f.name, value)

    def to_dict(self):
        return {
            "phase": self.phase.name,
            "players": list(self.players),
            "pool_balance": self.pool_balance,
            "last_timestamp": self.last_timestamp,
            "recent_winner": self.recent_winner,
            "outstanding_request_id": self.outstanding_request_id,
            "requested_at": self.requested_at,
        }
