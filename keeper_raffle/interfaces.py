"""
Capability interfaces between the raffle and its external services
"""

from typing import Any, Protocol, Sequence, Tuple, runtime_checkable


@runtime_checkable
class RandomnessOracle(Protocol):
    """
    Produces random values asynchronously

    `consumer` identifies the requester; the oracle later delivers to its
    RandomnessConsumer.raw_fulfill_random_words.
    """

    def request_random_words(
        self,
        key_hash: str,
        subscription_id: Any,
        request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
        consumer: Any = None,
    ) -> Any:
        ...


@runtime_checkable
class RandomnessConsumer(Protocol):
    """Receives oracle deliveries for requests it issued"""

    def raw_fulfill_random_words(self, caller: Any, request_id: Any, random_words: Sequence[int]) -> None:
        ...


@runtime_checkable
class AutomationTarget(Protocol):
    """Polled by a keeper: cheap readiness check, then the state-changing upkeep"""

    def check_upkeep(self, check_data: bytes = b"") -> Tuple[bool, bytes]:
        ...

    def perform_upkeep(self, perform_data: bytes = b"") -> Any:
        ...


@runtime_checkable
class PayoutGateway(Protocol):
    """Moves the pooled prize to the winner; returns False if the recipient rejects it"""

    def transfer(self, recipient: Any, amount: int) -> bool:
        ...
