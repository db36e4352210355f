"""
Shared fixtures for raffle tests
"""

import json
import logging

import pytest
from sqlalchemy import create_engine

from keeper_raffle.config import RaffleConfig
from keeper_raffle.database import RaffleStore, setup_raffle_database
from keeper_raffle.local_network import SimulatedClock, deploy_local_raffle

ENTRANCE_FEE = 100
INTERVAL = 30
START_TIME = 1_700_000_000


class FakeRedis:
    """Records published messages instead of talking to a server"""

    def __init__(self):
        self.messages = []

    def ping(self):
        return True

    def publish(self, channel, message):
        self.messages.append((channel, json.loads(message)))
        return 1


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    # the CLI installs its own handlers and stops propagation
    package_logger = logging.getLogger('keeper_raffle')
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def clock():
    return SimulatedClock(start=START_TIME)


@pytest.fixture
def config():
    return RaffleConfig(
        entrance_fee=ENTRANCE_FEE,
        key_hash="0x79d3d8832d904592c0bf9818b621522c988bb8b0c05cdc3b15aea1b6e8db0c15",
        subscription_id=None,
        callback_gas_limit=500000,
        interval=INTERVAL,
    )


@pytest.fixture
def deployment(clock, config):
    return deploy_local_raffle("localhost", clock=clock, config=config)


@pytest.fixture
def raffle(deployment):
    return deployment.raffle


@pytest.fixture
def coordinator(deployment):
    return deployment.coordinator


@pytest.fixture
def bank(deployment):
    return deployment.bank


@pytest.fixture
def open_round(raffle, clock):
    """Enter the given players and let the interval pass"""

    def _open_round(*players, amount=ENTRANCE_FEE):
        for player in players:
            raffle.enter(player, amount)
        clock.advance(INTERVAL + 1)
        return raffle

    return _open_round


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'raffle.db'}")
    assert setup_raffle_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return RaffleStore(engine, raffle_name="test")


@pytest.fixture
def fake_redis():
    return FakeRedis()
