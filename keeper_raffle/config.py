"""
Raffle Configuration
All configurable parameters for the raffle and its local network
"""

import os
from dataclasses import dataclass

# Smallest currency unit per whole coin (wei per ether)
WEI_PER_ETHER = 10**18

# Oracle request settings (fixed by the raffle, not per network)
REQUEST_CONFIRMATIONS = 3
NUM_WORDS = 1

# Coordinator mock constructor args (0.25 LINK premium, LINK per gas)
BASE_FEE = WEI_PER_ETHER // 4
GAS_PRICE_LINK = 10**9

# Per-network raffle parameters, keyed by chain id
NETWORK_CONFIG = {
    5: {
        "name": "goerli",
        "vrf_coordinator": "0x2Ca8E0C643bDe4C2E08ab1fA0da3401AdAD7734D",
        "entrance_fee": WEI_PER_ETHER // 100,  # 0.01 ether
        "key_hash": "0x79d3d8832d904592c0bf9818b621522c988bb8b0c05cdc3b15aea1b6e8db0c15",
        "subscription_id": "8106",
        "callback_gas_limit": 500000,
        "interval": 30,
    },
    31337: {
        "name": "localhost",
        # Coordinator is deployed as a mock on development chains
        "vrf_coordinator": None,
        "entrance_fee": WEI_PER_ETHER // 100,
        "key_hash": "0x79d3d8832d904592c0bf9818b621522c988bb8b0c05cdc3b15aea1b6e8db0c15",
        "subscription_id": None,
        "callback_gas_limit": 500000,
        "interval": 30,
    },
}

DEVELOPMENT_CHAINS = ("hardhat", "localhost")

# Environment overrides
RAFFLE_NETWORK = os.getenv("RAFFLE_NETWORK", "localhost").lower()
KEEPER_POLL_INTERVAL = int(os.getenv("KEEPER_POLL_INTERVAL", "10"))  # seconds
STALE_ROUND_WARNING = int(os.getenv("STALE_ROUND_WARNING", "600"))  # 10 minutes
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///raffle.db")
REDIS_EVENTS_CHANNEL = os.getenv("REDIS_EVENTS_CHANNEL", "raffle:events")


@dataclass(frozen=True)
class RaffleConfig:
    """Immutable raffle parameters fixed at construction"""

    entrance_fee: int
    key_hash: str
    subscription_id: object
    callback_gas_limit: int
    interval: int
    request_confirmations: int = REQUEST_CONFIRMATIONS
    num_words: int = NUM_WORDS

    def __post_init__(self):
        if self.entrance_fee < 0:
            raise ValueError(f"entrance_fee must be >= 0, got {self.entrance_fee}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")
        if self.callback_gas_limit < 0:
            raise ValueError(f"callback_gas_limit must be >= 0, got {self.callback_gas_limit}")
        if self.request_confirmations < 0:
            raise ValueError(f"request_confirmations must be >= 0, got {self.request_confirmations}")
        if self.num_words != NUM_WORDS:
            raise ValueError(f"num_words is fixed at {NUM_WORDS}, got {self.num_words}")


def get_network_config(network):
    """
    Look up the parameter table for a network

    Args:
        network: Network name ("localhost", "goerli", ...) or chain id

    Returns:
        tuple: (chain_id, network parameters dict)
    """
    if network == "hardhat":
        network = "localhost"

    for chain_id, params in NETWORK_CONFIG.items():
        if network == chain_id or network == params["name"]:
            return chain_id, params

    raise ValueError(f"Unknown network: {network}")


def is_development_chain(network):
    """True for networks where the randomness coordinator is mocked locally"""
    if isinstance(network, int):
        _, params = get_network_config(network)
        network = params["name"]
    return network in DEVELOPMENT_CHAINS


def load_raffle_config(network=None, subscription_id=None):
    """
    Build a RaffleConfig from the network table plus environment overrides

    Environment:
        RAFFLE_ENTRANCE_FEE: entrance fee in wei
        RAFFLE_INTERVAL: seconds between rounds
        RAFFLE_CALLBACK_GAS_LIMIT: oracle callback gas budget

    Args:
        network: Network name or chain id (default RAFFLE_NETWORK)
        subscription_id: Overrides the table's subscription id (local mocks)

    Returns:
        RaffleConfig
    """
    _, params = get_network_config(network or RAFFLE_NETWORK)

    entrance_fee = int(os.getenv("RAFFLE_ENTRANCE_FEE", params["entrance_fee"]))
    interval = int(os.getenv("RAFFLE_INTERVAL", params["interval"]))
    callback_gas_limit = int(os.getenv("RAFFLE_CALLBACK_GAS_LIMIT", params["callback_gas_limit"]))

    return RaffleConfig(
        entrance_fee=entrance_fee,
        key_hash=params["key_hash"],
        subscription_id=subscription_id if subscription_id is not None else params["subscription_id"],
        callback_gas_limit=callback_gas_limit,
        interval=interval,
    )
