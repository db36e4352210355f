"""
Keeper Raffle Package
Fixed-fee lottery driven by an automation keeper and a randomness oracle
"""

__version__ = "1.0.0"

# Export main components
from .config import RaffleConfig, load_raffle_config
from .errors import (
    IndexOutOfRange,
    InsufficientEntry,
    IntegrationError,
    InvalidRandomness,
    NotReady,
    OnlyCoordinatorCanFulfill,
    PayoutFailed,
    RaffleError,
    RoundInProgress,
    UnknownRequest,
    ValidationError,
)
from .events import EntryRecorded, EventLog, RoundTriggered, WinnerPicked
from .interfaces import AutomationTarget, PayoutGateway, RandomnessConsumer, RandomnessOracle
from .raffle import RaffleStateMachine
from .state import RafflePhase, RaffleState

__all__ = [
    'RaffleConfig',
    'load_raffle_config',
    'RaffleStateMachine',
    'RafflePhase',
    'RaffleState',
    'EventLog',
    'EntryRecorded',
    'RoundTriggered',
    'WinnerPicked',
    'RandomnessOracle',
    'RandomnessConsumer',
    'AutomationTarget',
    'PayoutGateway',
    'RaffleError',
    'ValidationError',
    'IntegrationError',
    'InsufficientEntry',
    'RoundInProgress',
    'NotReady',
    'IndexOutOfRange',
    'PayoutFailed',
    'UnknownRequest',
    'InvalidRandomness',
    'OnlyCoordinatorCanFulfill',
]
