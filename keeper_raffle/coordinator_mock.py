"""
Local Randomness Coordinator
In-process stand-in for the randomness oracle on development networks:
subscriptions, consumer registration, request tracking and deterministic
delivery
"""

import hashlib
import logging
from dataclasses import dataclass

from .config import BASE_FEE, GAS_PRICE_LINK

logger = logging.getLogger(__name__)


class CoordinatorError(Exception):
    """Base class for coordinator failures"""


class NonexistentRequest(CoordinatorError):
    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__("nonexistent request")


class InvalidSubscription(CoordinatorError):
    def __init__(self, subscription_id):
        self.subscription_id = subscription_id
        super().__init__(f"Invalid subscription: {subscription_id}")


class InvalidConsumer(CoordinatorError):
    def __init__(self, subscription_id, consumer):
        self.subscription_id = subscription_id
        self.consumer = consumer
        super().__init__(f"Consumer {consumer!r} is not registered on subscription {subscription_id}")


@dataclass
class RandomnessRequest:
    request_id: int
    subscription_id: int
    consumer: object
    key_hash: str
    request_confirmations: int
    callback_gas_limit: int
    num_words: int


def derive_random_words(request_id, num_words):
    """
    Deterministic words for a request: SHA-256 of "request_id:i" as a
    256-bit integer, one per requested word
    """
    words = []
    for i in range(num_words):
        digest = hashlib.sha256(f"{request_id}:{i}".encode()).hexdigest()
        words.append(int(digest, 16))
    return words


class RandomnessCoordinatorMock:
    """
    Randomness oracle for local runs and tests

    Delivery is manual: call fulfill_random_words() to play the oracle's
    asynchronous callback. A request is only forgotten once its consumer
    accepted the delivery, so a failed callback can be delivered again and
    a successful one can never be replayed.
    """

    def __init__(self, base_fee=BASE_FEE, gas_price_link=GAS_PRICE_LINK):
        # kept for parity with the live coordinator; fees are not charged
        self.base_fee = base_fee
        self.gas_price_link = gas_price_link
        self._subscriptions = {}
        self._pending = {}
        self._next_subscription_id = 1
        self._next_request_id = 1
        self.fulfilled = []

    # ========================================
    # SUBSCRIPTIONS
    # ========================================

    def create_subscription(self):
        subscription_id = self._next_subscription_id
        self._next_subscription_id += 1
        self._subscriptions[subscription_id] = []
        logger.info(f"Created randomness subscription #{subscription_id}")
        return subscription_id

    def add_consumer(self, subscription_id, consumer):
        consumers = self._get_subscription(subscription_id)
        if not any(c is consumer for c in consumers):
            consumers.append(consumer)

    def remove_consumer(self, subscription_id, consumer):
        consumers = self._get_subscription(subscription_id)
        for i, c in enumerate(consumers):
            if c is consumer:
                del consumers[i]
                return
        raise InvalidConsumer(subscription_id, consumer)

    def consumers(self, subscription_id):
        return tuple(self._get_subscription(subscription_id))

    def _get_subscription(self, subscription_id):
        if subscription_id not in self._subscriptions:
            raise InvalidSubscription(subscription_id)
        return self._subscriptions[subscription_id]

    # ========================================
    # REQUESTS
    # ========================================

    def request_random_words(self, key_hash, subscription_id, request_confirmations,
                             callback_gas_limit, num_words, consumer=None):
        consumers = self._get_subscription(subscription_id)
        if not any(c is consumer for c in consumers):
            raise InvalidConsumer(subscription_id, consumer)

        request_id = self._next_request_id
        self._next_request_id += 1
        self._pending[request_id] = RandomnessRequest(
            request_id=request_id,
            subscription_id=subscription_id,
            consumer=consumer,
            key_hash=key_hash,
            request_confirmations=request_confirmations,
            callback_gas_limit=callback_gas_limit,
            num_words=num_words,
        )
        logger.debug(f"Randomness request #{request_id} on subscription #{subscription_id}")
        return request_id

    def pending_requests(self):
        return sorted(self._pending)

    def get_request(self, request_id):
        request = self._pending.get(request_id)
        if request is None:
            raise NonexistentRequest(request_id)
        return request

    def fulfill_random_words(self, request_id, consumer=None):
        """Deliver the derived words for `request_id`"""
        request = self.get_request(request_id)
        words = derive_random_words(request_id, request.num_words)
        return self.fulfill_random_words_with_override(request_id, consumer, words)

    def fulfill_random_words_with_override(self, request_id, consumer, words):
        """
        Deliver `words` for `request_id` to its consumer

        Args:
            request_id: Pending request id
            consumer: Consumer to deliver to (default: the requester)
            words: Random words to deliver

        Returns:
            list: the delivered words
        """
        request = self.get_request(request_id)
        if consumer is None:
            consumer = request.consumer

        consumer.raw_fulfill_random_words(self, request_id, list(words))

        del self._pending[request_id]
        self.fulfilled.append(request_id)
        logger.debug(f"Randomness request #{request_id} fulfilled")
        return list(words)
