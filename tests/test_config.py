"""Configuration and local deployment tests"""

import pytest

from keeper_raffle.config import (
    NUM_WORDS,
    REQUEST_CONFIRMATIONS,
    WEI_PER_ETHER,
    RaffleConfig,
    get_network_config,
    is_development_chain,
    load_raffle_config,
)
from keeper_raffle.local_network import SimulatedClock, deploy_local_raffle


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("RAFFLE_ENTRANCE_FEE", "RAFFLE_INTERVAL", "RAFFLE_CALLBACK_GAS_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestNetworkConfig:

    def test_lookup_by_name_and_chain_id(self):
        assert get_network_config("goerli")[0] == 5
        assert get_network_config(5)[1]["name"] == "goerli"
        assert get_network_config(31337)[1]["name"] == "localhost"

    def test_hardhat_is_localhost(self):
        assert get_network_config("hardhat") == get_network_config("localhost")

    def test_unknown_network(self):
        with pytest.raises(ValueError, match="Unknown network"):
            get_network_config("mainnet")

    def test_development_chains(self):
        assert is_development_chain("localhost") is True
        assert is_development_chain("hardhat") is True
        assert is_development_chain(31337) is True
        assert is_development_chain("goerli") is False


class TestLoadRaffleConfig:

    def test_network_defaults(self, clean_env):
        config = load_raffle_config("goerli")

        assert config.entrance_fee == WEI_PER_ETHER // 100
        assert config.subscription_id == "8106"
        assert config.callback_gas_limit == 500000
        assert config.interval == 30
        assert config.request_confirmations == REQUEST_CONFIRMATIONS == 3
        assert config.num_words == NUM_WORDS == 1

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("RAFFLE_ENTRANCE_FEE", "250")
        clean_env.setenv("RAFFLE_INTERVAL", "5")

        config = load_raffle_config("localhost", subscription_id=7)

        assert config.entrance_fee == 250
        assert config.interval == 5
        assert config.subscription_id == 7


class TestRaffleConfig:

    def test_is_immutable(self, config):
        with pytest.raises(AttributeError):
            config.entrance_fee = 1

    @pytest.mark.parametrize("field", ["entrance_fee", "interval", "callback_gas_limit"])
    def test_negative_values_rejected(self, config, field):
        params = {
            "entrance_fee": config.entrance_fee,
            "key_hash": config.key_hash,
            "subscription_id": 1,
            "callback_gas_limit": config.callback_gas_limit,
            "interval": config.interval,
        }
        params[field] = -1

        with pytest.raises(ValueError):
            RaffleConfig(**params)

    def test_num_words_is_fixed(self, config):
        with pytest.raises(ValueError):
            RaffleConfig(config.entrance_fee, config.key_hash, 1, 500000, 30, num_words=2)


class TestDeployLocalRaffle:

    def test_refuses_live_networks(self):
        with pytest.raises(ValueError, match="not a development network"):
            deploy_local_raffle("goerli")

    def test_uses_network_table_by_default(self, clean_env):
        deployment = deploy_local_raffle("hardhat")

        assert deployment.subscription_id == 1
        assert deployment.raffle.entrance_fee == WEI_PER_ETHER // 100
        assert deployment.raffle.config.subscription_id == 1
        assert isinstance(deployment.clock, SimulatedClock)


class TestSimulatedClock:

    def test_advance(self):
        clock = SimulatedClock(start=100)

        assert clock() == 100
        assert clock.advance(5) == 105
        assert clock() == 105

    def test_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            SimulatedClock(start=0).advance(-1)
