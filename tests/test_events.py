"""Tests for owned event subscriptions."""

import pygame

from world_map.runtime.events import EventDispatcher


class TestEventDispatcher:
    """Subscribe, dispatch and dispose."""

    def test_dispatch_reaches_matching_handlers_only(self):
        dispatcher = EventDispatcher()
        received = []
        dispatcher.subscribe(pygame.MOUSEMOTION, received.append)
        dispatcher.subscribe(pygame.MOUSEBUTTONDOWN, lambda event: received.append("down"))
        event = pygame.event.Event(pygame.MOUSEMOTION, pos=(1, 2))
        assert dispatcher.dispatch(event) == 1
        assert received == [event]

    def test_dispose_detaches_the_handler(self):
        dispatcher = EventDispatcher()
        received = []
        subscription = dispatcher.subscribe(pygame.MOUSEMOTION, received.append)
        subscription.dispose()
        dispatcher.dispatch(pygame.event.Event(pygame.MOUSEMOTION, pos=(1, 2)))
        assert received == []
        assert dispatcher.subscriber_count() == 0

    def test_dispose_is_idempotent(self):
        dispatcher = EventDispatcher()
        subscription = dispatcher.subscribe(pygame.MOUSEMOTION, lambda event: None)
        subscription.dispose()
        subscription.dispose()
        assert not subscription.active

    def test_handler_disposed_during_dispatch_is_skipped(self):
        dispatcher = EventDispatcher()
        calls = []
        holder = {}

        def first(event):
            calls.append("first")
            holder["second"].dispose()

        dispatcher.subscribe(pygame.MOUSEMOTION, first)
        holder["second"] = dispatcher.subscribe(pygame.MOUSEMOTION, lambda event: calls.append("second"))
        dispatcher.dispatch(pygame.event.Event(pygame.MOUSEMOTION, pos=(0, 0)))
        assert calls == ["first"]

    def test_subscriber_count_per_type(self):
        dispatcher = EventDispatcher()
        dispatcher.subscribe(pygame.MOUSEWHEEL, lambda event: None)
        dispatcher.subscribe(pygame.MOUSEWHEEL, lambda event: None)
        assert dispatcher.subscriber_count(pygame.MOUSEWHEEL) == 2
        assert dispatcher.subscriber_count(pygame.FINGERDOWN) == 0
