"""
Raffle State Machine
Owns the raffle configuration and state and runs every public operation
as one serialized, all-or-nothing unit of work
"""

import logging
import threading
import time
from contextlib import contextmanager
from functools import partial

from .errors import NotReady, OnlyCoordinatorCanFulfill
from .events import EventLog
from .interfaces import PayoutGateway, RandomnessOracle
from .ledger import EntryLedger
from .readiness import ReadinessEvaluator
from .resolver import WinnerResolver
from .state import RaffleState
from .trigger import RoundTrigger

logger = logging.getLogger(__name__)


class _UnitOfWork:
    """Events and database connection of one in-flight operation"""

    def __init__(self, conn=None):
        self.conn = conn
        self.events = []
        # set once the operation wrote its own state and events
        self.saved = False


class RaffleStateMachine:
    """
    A fixed-fee lottery driven by a keeper and a randomness oracle

    Implements both AutomationTarget (check_upkeep / perform_upkeep) and
    RandomnessConsumer (raw_fulfill_random_words).

    Args:
        config: RaffleConfig
        oracle: RandomnessOracle the raffle requests values from; it is also
            the only caller allowed to deliver them
        payout: PayoutGateway used to pay winners
        clock: Callable returning the current time in seconds
        store: Optional RaffleStore; state is resumed from it if present
            and every operation is persisted in the same unit of work
        publisher: Optional RaffleEventPublisher attached to the event log
    """

    def __init__(self, config, oracle: RandomnessOracle, payout: PayoutGateway, clock=time.time, store=None,
                 publisher=None):
        self.config = config
        self.oracle = oracle
        self.payout = payout
        self.clock = clock
        self.store = store
        self.events = EventLog()
        self._lock = threading.RLock()

        state = store.load() if store is not None else None
        if state is None:
            state = RaffleState(last_timestamp=clock())
            if store is not None:
                store.save(state)
        else:
            logger.info(
                f"Resumed raffle '{store.raffle_name}' ({state.phase.name}, "
                f"{len(state.players)} players, pool {state.pool_balance})"
            )
        self._state = state

        self._ledger = EntryLedger(config, state)
        self._evaluator = ReadinessEvaluator(config, state, clock)
        self._trigger = RoundTrigger(config, state, self._evaluator, oracle, clock, consumer=self)
        self._resolver = WinnerResolver(state, payout, clock)

        if publisher is not None:
            publisher.attach(self.events)

        logger.info(
            f"🎟️ Raffle ready (fee: {config.entrance_fee}, interval: {config.interval}s, "
            f"subscription: {config.subscription_id})"
        )

    # ========================================
    # UNIT OF WORK
    # ========================================

    @contextmanager
    def _transaction(self):
        with self._lock:
            snapshot = self._state.snapshot()
            try:
                if self.store is not None:
                    with self.store.transaction() as conn:
                        uow = _UnitOfWork(conn)
                        yield uow
                        if not uow.saved:
                            self.store.save(self._state, uow.events, conn=conn)
                else:
                    uow = _UnitOfWork()
                    yield uow
            except Exception:
                self._state.restore(snapshot)
                raise

            self.events.record(uow.events)

        # subscribers (redis, observers) run outside the lock
        self.events.flush()

    # ========================================
    # ENTRY LEDGER
    # ========================================

    def enter(self, participant, amount):
        """Enter `participant` into the current round paying `amount`"""
        with self._transaction() as uow:
            uow.events.append(self._ledger.enter(participant, amount))

    # ========================================
    # AUTOMATION TARGET
    # ========================================

    def is_ready(self):
        """Readiness predicate; read-only"""
        with self._lock:
            return self._evaluator.is_ready()

    def check_upkeep(self, check_data=b""):
        return self.is_ready(), b""

    def trigger_round(self):
        """
        Close entries and request randomness for the current round

        Returns:
            The oracle request id
        """
        with self._transaction() as uow:
            event = self._trigger.trigger_round()
            uow.events.append(event)
        return event.request_id

    def perform_upkeep(self, perform_data=b""):
        try:
            return self.trigger_round()
        except NotReady as e:
            logger.warning(f"Upkeep refused: {e}")
            raise

    # ========================================
    # RANDOMNESS CONSUMER
    # ========================================

    def raw_fulfill_random_words(self, caller, request_id, random_words):
        """Oracle delivery entry point; only the configured oracle may call it"""
        if caller is not self.oracle:
            raise OnlyCoordinatorCanFulfill(caller, self.oracle)
        self.resolve(request_id, random_words)

    def resolve(self, request_id, random_values):
        """
        Pick and pay the winner for `request_id`

        With a store attached, the reset state and the draw are written to
        the open transaction before the transfer; only the commit follows it.
        """
        with self._transaction() as uow:
            before_payout = None
            if uow.conn is not None:
                before_payout = partial(self._save_before_payout, uow)

            event = self._resolver.resolve(request_id, random_values, before_payout)
            uow.events.append(event)

    def _save_before_payout(self, uow, event):
        self.store.save(self._state, [event], conn=uow.conn)
        uow.saved = True

    # ========================================
    # ACCESSORS
    # ========================================

    @property
    def entrance_fee(self):
        return self.config.entrance_fee

    def get_player(self, index):
        with self._lock:
            return self._ledger.get_player(index)

    @property
    def recent_winner(self):
        return self._state.recent_winner

    @property
    def raffle_state(self):
        return self._state.phase

    phase = raffle_state

    @property
    def number_of_players(self):
        return len(self._state.players)

    @property
    def players(self):
        return tuple(self._state.players)

    @property
    def pool_balance(self):
        return self._state.pool_balance

    @property
    def last_timestamp(self):
        return self._state.last_timestamp

    @property
    def outstanding_request_id(self):
        return self._state.outstanding_request_id

    @property
    def requested_at(self):
        return self._state.requested_at

    @property
    def interval(self):
        return self.config.interval

    @property
    def request_confirmations(self):
        return self.config.request_confirmations

    @property
    def num_words(self):
        return self.config.num_words

    def readiness(self):
        """ReadinessSnapshot with every input of the predicate"""
        with self._lock:
            return self._evaluator.snapshot()

    def state_snapshot(self):
        with self._lock:
            return self._state.snapshot()
