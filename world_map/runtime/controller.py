# world_map/runtime/controller.py

"""
================================================================================
MAP CONTROLLER
================================================================================
The public face of the interactive map. Subscribes to pygame input events,
turns them into drag, momentum and zoom operations on one shared
ViewportState, and redraws the canvas through the MapRenderer.

Data Contract:
---------------
- Inputs (on initialization):
    - canvas (pygame.Surface): The surface the map is drawn on.
    - dispatcher (EventDispatcher): Source of input events.
    - asset (MapAsset, optional): May also be supplied later via set_asset().
    - config (dict): Camera and rendering overrides.
    - scheduler (FrameScheduler, optional): Runs the momentum animation.
    - time_ms (callable, optional): Millisecond clock used for drag velocity.
    - on_gesture_end (callable, optional): Called when a pan settles.
- Public Methods:
    - resize(canvas=None), redraw(), tick()
    - draw_marker(lng, lat, label), clear_markers(), set_asset(asset)
    - center_longitude(), screen_to_lnglat(x, y), destroy()
- Side Effects: Draws on the canvas. Holds event subscriptions until
  destroy() (or leaving a `with` block).
================================================================================
"""
import logging
from typing import Callable

import pygame

from .. import config as DEFAULTS
from .events import EventDispatcher
from .renderer import MapRenderer, Marker
from .scheduler import FrameScheduler
from .viewport import ViewportController


class MapController:
    """Interactive pan/zoom map bound to a pygame surface."""

    def __init__(self, canvas: pygame.Surface, dispatcher: EventDispatcher, asset=None,
                 config: dict = None, scheduler: FrameScheduler = None,
                 time_ms: Callable[[], float] = None, on_gesture_end: Callable[[], None] = None,
                 header_height: int = None):
        self.logger = logging.getLogger(__name__)
        config = dict(config or {})
        if header_height is not None:
            config['header_height'] = header_height
        self.header_height = config.get('header_height', DEFAULTS.HEADER_HEIGHT_PX)
        self.pinch_threshold = config.get('pinch_threshold', DEFAULTS.PINCH_THRESHOLD)

        self.canvas = canvas
        self.dispatcher = dispatcher
        self.scheduler = scheduler or FrameScheduler()
        self.time_ms = time_ms or pygame.time.get_ticks
        self.on_gesture_end = on_gesture_end

        self.viewport = ViewportController(config)
        self.state = self.viewport.state
        self.renderer = MapRenderer(self.viewport, config)
        self.asset = None
        self.markers = []

        self.needs_redraw = True
        self._momentum_task = None
        self._pointer_pos = (canvas.get_width() / 2, canvas.get_height() / 2)
        self._fingers = {}
        self._destroyed = False

        self.viewport.set_canvas_size(*canvas.get_size())
        self.subscriptions = [
            dispatcher.subscribe(pygame.MOUSEBUTTONDOWN, self._on_mouse_down),
            dispatcher.subscribe(pygame.MOUSEMOTION, self._on_mouse_motion),
            dispatcher.subscribe(pygame.MOUSEBUTTONUP, self._on_mouse_up),
            dispatcher.subscribe(pygame.WINDOWLEAVE, self._on_release),
            dispatcher.subscribe(pygame.MOUSEWHEEL, self._on_wheel),
            dispatcher.subscribe(pygame.FINGERDOWN, self._on_finger_down),
            dispatcher.subscribe(pygame.FINGERMOTION, self._on_finger_motion),
            dispatcher.subscribe(pygame.FINGERUP, self._on_finger_up),
            dispatcher.subscribe(pygame.MULTIGESTURE, self._on_pinch),
        ]

        if asset is not None:
            self.set_asset(asset)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.destroy()
        return False

    # --- Public API ---
    def set_asset(self, asset):
        self.asset = asset
        self.viewport.set_image_size(asset.image_width, asset.image_height)
        self.renderer.set_asset(asset)
        self.logger.info(f"Map asset set: {asset.point_count()} terrain points.")
        self.redraw()

    def resize(self, canvas: pygame.Surface = None):
        if canvas is not None:
            self.canvas = canvas
        self.viewport.set_canvas_size(*self.canvas.get_size())
        # Crisp pixels after every resize.
        self.renderer.smoothing = False
        self.redraw()

    def redraw(self) -> bool:
        self.needs_redraw = False
        return self.renderer.draw(self.canvas, self.markers)

    def invalidate(self):
        self.needs_redraw = True

    def draw_marker(self, longitude: float, latitude: float, label: str = "") -> Marker:
        marker = Marker(longitude, latitude, label)
        self.markers.append(marker)
        self.invalidate()
        return marker

    def clear_markers(self):
        self.markers.clear()
        self.invalidate()

    def tick(self) -> bool:
        """Runs one frame of scheduled work. Returns True if the canvas was redrawn."""
        self.scheduler.tick()
        if self.needs_redraw:
            self.redraw()
            return True
        return False

    def center_longitude(self) -> float:
        return self.viewport.center_longitude()

    def screen_to_lnglat(self, x: float, y: float) -> tuple | None:
        return self.viewport.screen_to_lnglat(x, y)

    def destroy(self):
        """Releases every event subscription and stops any animation."""
        if self._destroyed:
            return
        self._destroyed = True
        for subscription in self.subscriptions:
            subscription.dispose()
        self.subscriptions.clear()
        self._cancel_momentum()
        self.state.is_dragging = False
        self.logger.debug("Map controller destroyed.")

    # --- Gestures ---
    def _start_drag(self, pos: tuple):
        if self.header_height and 0 <= pos[1] < self.header_height:
            return
        self._cancel_momentum()
        self.viewport.begin_drag(pos[0], pos[1], self.time_ms())

    def _move_drag(self, pos: tuple):
        if self.viewport.drag_to(pos[0], pos[1], self.time_ms()):
            self.invalidate()

    def _release(self):
        if not self.state.is_dragging:
            return
        if self.viewport.end_drag():
            self.logger.debug(f"Momentum started at {self.state.speed:.2f} px/ms.")
            self._momentum_task = self.scheduler.schedule(self._momentum_frame)
        else:
            self._gesture_ended()

    def _momentum_frame(self) -> bool:
        if not self.state.is_momentum_active:
            return False
        keep_going = self.viewport.momentum_step()
        self.invalidate()
        if not keep_going:
            self._momentum_task = None
            self._gesture_ended()
        return keep_going

    def _cancel_momentum(self):
        if self._momentum_task is not None:
            self._momentum_task.cancel()
            self._momentum_task = None
        self.viewport.stop_momentum()

    def _gesture_ended(self):
        if self.on_gesture_end is not None:
            self.on_gesture_end()

    def _zoom(self, pos: tuple, zoom_in: bool):
        if self.viewport.zoom_at(pos[0], pos[1], zoom_in):
            self.invalidate()

    # --- Event handlers ---
    @staticmethod
    def _from_touch(event) -> bool:
        # SDL mirrors touches as mouse events; fingers are handled separately.
        return getattr(event, 'touch', False)

    def _on_mouse_down(self, event):
        if event.button != 1 or self._from_touch(event):
            return
        self._pointer_pos = event.pos
        self._start_drag(event.pos)

    def _on_mouse_motion(self, event):
        if self._from_touch(event):
            return
        self._pointer_pos = event.pos
        self._move_drag(event.pos)

    def _on_mouse_up(self, event):
        if event.button != 1 or self._from_touch(event):
            return
        self._release()

    def _on_release(self, event):
        self._release()

    def _on_wheel(self, event):
        if event.y == 0:
            return
        pos = getattr(event, 'pos', None) or self._pointer_pos
        self._zoom(pos, event.y > 0)

    def _finger_pos(self, event) -> tuple:
        width, height = self.canvas.get_size()
        return event.x * width, event.y * height

    def _on_finger_down(self, event):
        self._fingers[event.finger_id] = self._finger_pos(event)
        if len(self._fingers) == 1:
            self._start_drag(self._fingers[event.finger_id])

    def _on_finger_motion(self, event):
        if event.finger_id not in self._fingers:
            return
        self._fingers[event.finger_id] = self._finger_pos(event)
        if len(self._fingers) == 1:
            self._move_drag(self._fingers[event.finger_id])

    def _on_finger_up(self, event):
        self._fingers.pop(event.finger_id, None)
        self._release()

    def _on_pinch(self, event):
        if abs(event.pinched) < self.pinch_threshold:
            return
        self._zoom(self._finger_pos(event), event.pinched > 0)
