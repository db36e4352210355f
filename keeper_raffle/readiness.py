"""
Readiness Evaluator
Read-only predicate deciding whether the next round may be triggered
"""

from dataclasses import dataclass

from .state import RafflePhase


@dataclass(frozen=True)
class ReadinessSnapshot:
    balance: int
    player_count: int
    phase: RafflePhase
    elapsed: float
    ready: bool


class ReadinessEvaluator:
    """Pure function of the raffle state and the clock; safe to poll at any time"""

    def __init__(self, config, state, clock):
        self.config = config
        self.state = state
        self.clock = clock

    def snapshot(self):
        """Evaluate every readiness input at one instant"""
        state = self.state
        elapsed = self.clock() - state.last_timestamp
        player_count = len(state.players)

        is_open = state.phase == RafflePhase.OPEN
        time_passed = elapsed > self.config.interval
        has_players = player_count > 0
        has_balance = state.pool_balance > 0

        return ReadinessSnapshot(
            balance=state.pool_balance,
            player_count=player_count,
            phase=state.phase,
            elapsed=elapsed,
            ready=is_open and time_passed and has_players and has_balance,
        )

    def is_ready(self):
        return self.snapshot().ready
