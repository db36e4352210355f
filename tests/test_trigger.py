"""Round trigger tests"""

import pytest

from keeper_raffle.bank import InMemoryBank
from keeper_raffle.coordinator_mock import InvalidConsumer
from keeper_raffle.errors import NotReady
from keeper_raffle.events import RoundTriggered
from keeper_raffle.raffle import RaffleStateMachine
from keeper_raffle.state import RafflePhase


class UnavailableOracle:
    def __init__(self):
        self.calls = 0

    def request_random_words(self, *args, **kwargs):
        self.calls += 1
        raise ConnectionError("oracle unreachable")


class TestTriggerRound:

    def test_moves_to_calculating_and_records_request(self, open_round, coordinator):
        raffle = open_round("alice")

        request_id = raffle.trigger_round()

        assert request_id == 1
        assert raffle.raffle_state == RafflePhase.CALCULATING
        assert raffle.outstanding_request_id == request_id
        assert coordinator.pending_requests() == [request_id]
        assert raffle.events[-1] == RoundTriggered(request_id=request_id)

    def test_request_carries_raffle_parameters(self, open_round, coordinator, config, deployment):
        raffle = open_round("alice")

        request_id = raffle.trigger_round()
        request = coordinator.get_request(request_id)

        assert request.key_hash == config.key_hash
        assert request.subscription_id == deployment.subscription_id
        assert request.request_confirmations == 3
        assert request.callback_gas_limit == config.callback_gas_limit
        assert request.num_words == 1
        assert request.consumer is raffle

    def test_zero_players_is_refused_without_contacting_oracle(self, raffle, clock, coordinator, config):
        clock.advance(config.interval + 1)

        with pytest.raises(NotReady) as exc_info:
            raffle.trigger_round()

        error = exc_info.value
        assert error.balance == 0
        assert error.player_count == 0
        assert error.phase == RafflePhase.OPEN
        assert error.elapsed == config.interval + 1
        assert coordinator.pending_requests() == []
        assert raffle.raffle_state == RafflePhase.OPEN

    def test_second_trigger_while_calculating_is_refused(self, open_round, coordinator):
        raffle = open_round("alice")
        raffle.trigger_round()

        with pytest.raises(NotReady) as exc_info:
            raffle.trigger_round()

        assert exc_info.value.phase == RafflePhase.CALCULATING
        assert coordinator.pending_requests() == [1]

    def test_premature_trigger_is_refused(self, raffle, config):
        raffle.enter("alice", config.entrance_fee)

        with pytest.raises(NotReady):
            raffle.trigger_round()

        assert raffle.raffle_state == RafflePhase.OPEN
        assert raffle.events.of_type(RoundTriggered) == []

    def test_oracle_failure_rolls_back_phase(self, config, clock):
        oracle = UnavailableOracle()
        raffle = RaffleStateMachine(config, oracle, InMemoryBank(), clock=clock)
        raffle.enter("alice", config.entrance_fee)
        clock.advance(config.interval + 1)

        with pytest.raises(ConnectionError):
            raffle.trigger_round()

        assert oracle.calls == 1
        assert raffle.raffle_state == RafflePhase.OPEN
        assert raffle.outstanding_request_id is None
        assert raffle.number_of_players == 1
        assert raffle.events.of_type(RoundTriggered) == []
        assert raffle.is_ready() is True

    def test_unregistered_consumer_rolls_back_phase(self, open_round, coordinator, deployment):
        raffle = open_round("alice")
        coordinator.remove_consumer(deployment.subscription_id, raffle)

        with pytest.raises(InvalidConsumer):
            raffle.trigger_round()

        assert raffle.raffle_state == RafflePhase.OPEN
        assert raffle.outstanding_request_id is None


class TestUpkeep:

    def test_check_upkeep_false_without_funds(self, raffle, clock, config):
        clock.advance(config.interval + 1)

        upkeep_needed, perform_data = raffle.check_upkeep(b"")

        assert upkeep_needed is False
        assert perform_data == b""

    def test_check_upkeep_false_when_raffle_not_open(self, open_round):
        raffle = open_round("alice")
        raffle.perform_upkeep(b"")

        upkeep_needed, _ = raffle.check_upkeep()

        assert raffle.raffle_state == 1
        assert upkeep_needed is False

    def test_check_upkeep_false_when_time_has_not_passed(self, raffle, clock, config):
        raffle.enter("alice", config.entrance_fee)
        clock.advance(config.interval - 5)

        upkeep_needed, _ = raffle.check_upkeep()

        assert upkeep_needed is False

    def test_check_upkeep_true_when_all_conditions_hold(self, raffle, clock, config):
        clock.advance(config.interval + 1)
        raffle.enter("alice", config.entrance_fee)

        upkeep_needed, _ = raffle.check_upkeep()

        assert upkeep_needed is True

    def test_perform_upkeep_reverts_when_not_needed(self, raffle):
        with pytest.raises(NotReady):
            raffle.perform_upkeep(b"")

    def test_perform_upkeep_returns_request_id(self, open_round):
        raffle = open_round("alice")

        assert raffle.perform_upkeep(b"") > 0
