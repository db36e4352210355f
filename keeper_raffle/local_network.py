"""
Local Network
Wires a raffle to an in-process coordinator, bank and controllable clock,
the way a development chain deployment does
"""

import logging
import time
from dataclasses import dataclass, replace

from .bank import InMemoryBank
from .config import BASE_FEE, GAS_PRICE_LINK, is_development_chain, load_raffle_config
from .coordinator_mock import RandomnessCoordinatorMock
from .raffle import RaffleStateMachine

logger = logging.getLogger(__name__)


class SimulatedClock:
    """Wall clock that only moves when told to"""

    def __init__(self, start=None):
        self.now = float(start if start is not None else time.time())

    def __call__(self):
        return self.now

    def advance(self, seconds):
        if seconds < 0:
            raise ValueError("Time cannot go backwards")
        self.now += seconds
        return self.now


@dataclass
class LocalDeployment:
    raffle: RaffleStateMachine
    coordinator: RandomnessCoordinatorMock
    bank: InMemoryBank
    clock: object
    subscription_id: int


def deploy_local_raffle(network="localhost", clock=None, bank=None, store=None, publisher=None, config=None):
    """
    Deploy a raffle on a development network

    Deploys the coordinator mock, creates a subscription, builds the raffle
    from the network parameters and registers it as the subscription's
    consumer.

    Args:
        network: Development network name ("localhost" or "hardhat")
        clock: Clock callable (default: SimulatedClock at the current time)
        bank: Payout gateway (default: empty InMemoryBank)
        store: Optional RaffleStore
        publisher: Optional RaffleEventPublisher
        config: RaffleConfig overriding the network table; its
            subscription id is replaced by the new subscription

    Returns:
        LocalDeployment
    """
    if not is_development_chain(network):
        raise ValueError(f"{network} is not a development network; deploy against the live coordinator instead")

    logger.info("Local network detected! Deploying mocks...")
    coordinator = RandomnessCoordinatorMock(BASE_FEE, GAS_PRICE_LINK)
    subscription_id = coordinator.create_subscription()

    if config is None:
        config = load_raffle_config(network, subscription_id=subscription_id)
    else:
        config = replace(config, subscription_id=subscription_id)

    clock = clock if clock is not None else SimulatedClock()
    bank = bank if bank is not None else InMemoryBank()

    raffle = RaffleStateMachine(config, coordinator, bank, clock=clock, store=store, publisher=publisher)
    coordinator.add_consumer(subscription_id, raffle)
    logger.info(f"Raffle deployed on {network} (subscription #{subscription_id})")

    return LocalDeployment(
        raffle=raffle,
        coordinator=coordinator,
        bank=bank,
        clock=clock,
        subscription_id=subscription_id,
    )
