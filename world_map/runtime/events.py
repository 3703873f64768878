# world_map/runtime/events.py

"""
================================================================================
EVENT DISPATCHER
================================================================================
Routes pygame events to subscribed handlers. Every subscription is an owned
handle; disposing it detaches the handler, and disposing twice is harmless.
================================================================================
"""
import logging
from collections import defaultdict
from typing import Callable

import pygame


class Subscription:
    """Owned registration of one handler for one event type."""

    def __init__(self, dispatcher: 'EventDispatcher', event_type: int, handler: Callable):
        self.dispatcher = dispatcher
        self.event_type = event_type
        self.handler = handler
        self.active = True

    def dispose(self):
        if not self.active:
            return
        self.active = False
        self.dispatcher._remove(self)


class EventDispatcher:
    """Holds handlers per pygame event type."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._handlers = defaultdict(list)

    def subscribe(self, event_type: int, handler: Callable[[pygame.event.Event], None]) -> Subscription:
        subscription = Subscription(self, event_type, handler)
        self._handlers[event_type].append(subscription)
        return subscription

    def _remove(self, subscription: Subscription):
        handlers = self._handlers.get(subscription.event_type)
        if handlers and subscription in handlers:
            handlers.remove(subscription)
            if not handlers:
                del self._handlers[subscription.event_type]

    def subscriber_count(self, event_type: int = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, ()))
        return sum(len(handlers) for handlers in self._handlers.values())

    def dispatch(self, event: pygame.event.Event) -> int:
        """Calls every handler subscribed to the event's type. Returns how many ran."""
        handled = 0
        for subscription in list(self._handlers.get(event.type, ())):
            if subscription.active:
                subscription.handler(event)
                handled += 1
        return handled
