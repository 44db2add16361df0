"""
Checkout Queue Service for Store Map Service.

Keeps the number of people waiting at each checkout of a store in Redis.
Every count is written under its own key with a TTL, so a checkout that
stops reporting drops out of the result on its own.

Key layout:
    store:{store_id}:queue:{checkout_number} -> {"people_count": n, "updated_at": iso}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict

import redis
from redis.exceptions import RedisError
from flask import current_app


logger = logging.getLogger(__name__)


class QueueUnavailableError(Exception):
    """Raised when the queue cache cannot be reached."""
    pass


class QueueService:
    """
    Reads and writes checkout queue lengths.

    Args:
        client: redis.Redis client (or any object with set/mget/scan_iter)
        ttl_seconds: Lifetime of a reported count
    """

    KEY_TEMPLATE = 'store:{store_id}:queue:{checkout_number}'
    DEFAULT_TTL_SECONDS = 600

    def __init__(self, client, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, redis_url: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> 'QueueService':
        """Create a service backed by a Redis connection pool for ``redis_url``."""
        return cls(redis.from_url(redis_url, decode_responses=True), ttl_seconds=ttl_seconds)

    @classmethod
    def key_for(cls, store_id, checkout_number) -> str:
        return cls.KEY_TEMPLATE.format(store_id=store_id, checkout_number=checkout_number)

    def update_queue(self, store_id: int, checkout_number: int, people_count: int) -> Dict:
        """
        Record the current queue length at a checkout.

        Args:
            store_id: Store the checkout belongs to
            checkout_number: Checkout number (1-based)
            people_count: People currently waiting

        Returns:
            The stored entry

        Raises:
            ValueError: Invalid checkout number or people count
            QueueUnavailableError: Redis could not be reached
        """
        if isinstance(checkout_number, bool) or not isinstance(checkout_number, int) or checkout_number < 1:
            raise ValueError('checkout_number must be a positive integer')
        if isinstance(people_count, bool) or not isinstance(people_count, int) or people_count < 0:
            raise ValueError('people_count must be a non-negative integer')

        entry = {
            'people_count': people_count,
            'updated_at': datetime.now(timezone.utc).isoformat(),
        }
        key = self.key_for(store_id, checkout_number)

        try:
            self.client.set(key, json.dumps(entry), ex=self.ttl_seconds)
        except RedisError as e:
            logger.error(f'Failed to update queue {key}: {e}')
            raise QueueUnavailableError(f'Queue cache unavailable: {e}') from e

        logger.debug(f'Queue {key} set to {people_count} (ttl {self.ttl_seconds}s)')
        return entry

    def get_queues(self, store_id: int) -> Dict[int, int]:
        """
        Return the current queue length of every checkout that has reported.

        Args:
            store_id: Store to read

        Returns:
            Dict mapping checkout number to people count, ordered by checkout

        Raises:
            QueueUnavailableError: Redis could not be reached
        """
        pattern = self.key_for(store_id, '*')
        try:
            keys = list(self.client.scan_iter(match=pattern))
            values = self.client.mget(keys) if keys else []
        except RedisError as e:
            logger.error(f'Failed to read queues for store {store_id}: {e}')
            raise QueueUnavailableError(f'Queue cache unavailable: {e}') from e

        queues = {}
        for key, raw in zip(keys, values):
            if raw is None:
                # Expired between SCAN and MGET
                continue
            if isinstance(key, bytes):
                key = key.decode()
            try:
                checkout_number = int(key.rsplit(':', 1)[1])
                queues[checkout_number] = int(json.loads(raw)['people_count'])
            except (ValueError, KeyError, TypeError) as e:
                logger.warning(f'Skipping malformed queue entry {key}: {e}')

        return dict(sorted(queues.items()))


def get_queue_service() -> QueueService:
    """Return the QueueService registered on the current application."""
    return current_app.extensions['queue_service']
