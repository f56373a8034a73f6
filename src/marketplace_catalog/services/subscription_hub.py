"""Explicit topic subscriptions for catalog change notifications.

The hub is created by the application factory and handed to whoever needs it.
Subscribers keep the token returned by ``subscribe`` and pass it back to
``unsubscribe`` when they are torn down.
"""

import inspect
import logging
import uuid
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

# Handlers may be plain callables or coroutine functions
SubscriptionHandler = Callable[[Any], Any]


class SubscriptionHub:
    """In-process publish/subscribe registry keyed by topic name."""

    def __init__(self) -> None:
        """Initialize an empty hub."""
        self._handlers: dict[str, dict[str, SubscriptionHandler]] = {}
        self._topic_by_token: dict[str, str] = {}

    def subscribe(self, topic: str, handler: SubscriptionHandler) -> str:
        """Register a handler for a topic.

        Args:
            topic: Topic name, e.g. "catalog.products"
            handler: Callable invoked with each published event

        Returns:
            Token identifying the subscription
        """
        token = f"sub_{uuid.uuid4().hex[:12]}"
        self._handlers.setdefault(topic, {})[token] = handler
        self._topic_by_token[token] = topic
        logger.debug(f"Subscribed {token} to {topic}")
        return token

    def unsubscribe(self, token: str) -> bool:
        """Remove a subscription.

        Args:
            token: Token returned by ``subscribe``

        Returns:
            True if the subscription existed, False otherwise
        """
        topic = self._topic_by_token.pop(token, None)
        if topic is None:
            return False

        handlers = self._handlers.get(topic, {})
        handlers.pop(token, None)
        if not handlers:
            self._handlers.pop(topic, None)

        logger.debug(f"Unsubscribed {token} from {topic}")
        return True

    def subscriber_count(self, topic: str) -> int:
        return len(self._handlers.get(topic, {}))

    async def publish(self, topic: str, event: Any) -> int:
        """Deliver an event to every handler subscribed to a topic.

        A failing handler is logged and does not prevent delivery to the rest.

        Args:
            topic: Topic name
            event: Event payload passed to each handler

        Returns:
            Number of handlers that completed successfully
        """
        handlers = list(self._handlers.get(topic, {}).items())
        delivered = 0

        for token, handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.exception(f"Subscriber {token} failed handling {topic}: {e}")

        logger.debug(f"Published {topic} to {delivered}/{len(handlers)} subscribers")
        return delivered
