"""
Raffle Errors
Validation errors are caller-fixable; integration errors come from the
oracle or payout side and leave the round retriable
"""


class RaffleError(Exception):
    """Base class for all raffle failures"""


class ValidationError(RaffleError):
    """Caller-fixable failure; the attempted operation changed nothing"""


class IntegrationError(RaffleError):
    """Failure at the oracle or payout boundary"""


class InsufficientEntry(ValidationError):
    def __init__(self, amount, entrance_fee):
        self.amount = amount
        self.entrance_fee = entrance_fee
        super().__init__(f"Entry of {amount} is below the entrance fee of {entrance_fee}")


class RoundInProgress(ValidationError):
    def __init__(self, phase):
        self.phase = phase
        super().__init__(f"Raffle is not open (phase: {phase.name})")


class NotReady(ValidationError):
    """Upkeep was requested while the readiness predicate is false"""

    def __init__(self, balance, player_count, phase, elapsed):
        self.balance = balance
        self.player_count = player_count
        self.phase = phase
        self.elapsed = elapsed
        super().__init__(
            f"Upkeep not needed (balance={balance}, players={player_count}, "
            f"phase={phase.name}, elapsed={elapsed:.0f}s)"
        )


class IndexOutOfRange(ValidationError, IndexError):
    def __init__(self, index, player_count):
        self.index = index
        self.player_count = player_count
        if player_count == 0:
            message = "No players participated!"
        else:
            message = f"Player index {index} out of range (players: {player_count})"
        super().__init__(message)


class PayoutFailed(IntegrationError):
    def __init__(self, winner, amount, reason=None):
        self.winner = winner
        self.amount = amount
        self.reason = reason
        message = f"Transfer of {amount} to {winner} failed"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnknownRequest(IntegrationError):
    def __init__(self, request_id, outstanding_request_id):
        self.request_id = request_id
        self.outstanding_request_id = outstanding_request_id
        super().__init__(
            f"Request {request_id} does not match the outstanding request ({outstanding_request_id})"
        )


class InvalidRandomness(IntegrationError):
    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__(f"No random values delivered for request {request_id}")


class OnlyCoordinatorCanFulfill(IntegrationError):
    def __init__(self, caller, coordinator):
        self.caller = caller
        self.coordinator = coordinator
        super().__init__(f"Only the configured coordinator can fulfill randomness (caller: {caller!r})")
