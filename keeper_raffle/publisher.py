"""
Redis Publisher for Raffle Events
Publishes committed raffle events to a Redis channel for external observers
"""

import json
import logging
import os

import redis

from .config import REDIS_EVENTS_CHANNEL

logger = logging.getLogger(__name__)


class RaffleEventPublisher:
    def __init__(self, redis_url=None, client=None, channel=REDIS_EVENTS_CHANNEL):
        self.channel = channel
        self.client = client
        self.enabled = False

        if client is not None:
            self.enabled = True
            return

        redis_url = redis_url or os.getenv('REDIS_URL')
        if redis_url:
            if '://' not in redis_url:
                redis_url = f'redis://{redis_url}'
            try:
                self.client = redis.from_url(redis_url, decode_responses=True)
                self.client.ping()
                self.enabled = True
                logger.info("✅ Raffle Redis publisher connected")
            except redis.RedisError as e:
                logger.warning(f"⚠️ Redis unavailable for raffle publisher: {e}")
        else:
            logger.info("REDIS_URL not set, raffle events will not be published")

    def publish(self, action, data=None):
        """Publish an event to the raffle channel"""
        if not self.enabled:
            return False

        try:
            message = json.dumps({
                'action': action,
                'data': data or {}
            }, default=str)
            self.client.publish(self.channel, message)
            logger.debug(f"📤 Published to {self.channel}: {action}")
            return True
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.error(f"❌ Failed to publish {action} to {self.channel}: {e}")
            return False

    def publish_event(self, event):
        """EventLog subscriber: forwards one raffle event"""
        return self.publish(event.name, event.to_dict())

    def attach(self, event_log):
        """Subscribe to every event in `event_log`; returns the unsubscribe function"""
        return event_log.subscribe(None, self.publish_event)
