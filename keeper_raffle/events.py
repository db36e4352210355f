"""
Raffle Events
Notifications emitted by committed raffle operations, kept in an
ordered append-only log that observers can subscribe to
"""

import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryRecorded:
    participant: object
    amount: int = 0

    name = "EntryRecorded"

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class RoundTriggered:
    request_id: object

    name = "RoundTriggered"

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class WinnerPicked:
    winner: object
    request_id: object = None
    winner_index: int = None
    random_value: int = None
    prize: int = 0
    player_count: int = 0

    name = "WinnerPicked"

    def to_dict(self):
        return asdict(self)


class EventLog:
    """Ordered, append-only record of committed raffle events"""

    def __init__(self):
        self._events = []
        self._subscribers = []
        self._pending = deque()
        self._lock = threading.Lock()
        # held by the thread currently delivering to subscribers
        self._notify_lock = threading.Lock()

    def __len__(self):
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))

    def __getitem__(self, index):
        return self._events[index]

    def of_type(self, event_type):
        return [event for event in self._events if isinstance(event, event_type)]

    def subscribe(self, event_type, callback):
        """
        Call `callback(event)` for every future event of `event_type`
        (None subscribes to all events)

        Returns:
            callable: unsubscribe function
        """
        entry = [event_type, callback, False]
        self._subscribers.append(entry)
        return lambda: self._remove(entry)

    def once(self, event_type, callback):
        """Like subscribe, but the callback fires for the next matching event only"""
        entry = [event_type, callback, True]
        self._subscribers.append(entry)
        return lambda: self._remove(entry)

    def _remove(self, entry):
        if entry in self._subscribers:
            self._subscribers.remove(entry)

    def record(self, events):
        """Append committed events; subscribers see them on the next flush()"""
        with self._lock:
            self._events.extend(events)
            self._pending.extend(events)

    def flush(self):
        """
        Deliver recorded events to subscribers in log order

        Never waits on a slow subscriber: if another thread is already
        delivering, it also delivers the events recorded here.
        """
        while True:
            if not self._notify_lock.acquire(blocking=False):
                return
            try:
                while True:
                    with self._lock:
                        if not self._pending:
                            break
                        event = self._pending.popleft()
                    self._notify(event)
            finally:
                self._notify_lock.release()

            # an event recorded while we were releasing would otherwise wait
            with self._lock:
                if not self._pending:
                    return

    def _notify(self, event):
        for entry in list(self._subscribers):
            event_type, callback, one_shot = entry
            if event_type is not None and not isinstance(event, event_type):
                continue
            if one_shot:
                self._remove(entry)
            try:
                callback(event)
            except Exception as e:
                # The operation has already committed; observers cannot undo it
                logger.error(f"Event subscriber failed for {event.name}: {e}", exc_info=True)
