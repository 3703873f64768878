# viewer.py

"""
================================================================================
WORLD MAP VIEWER
================================================================================
Interactive viewer for a labelled world map document.

Controls:
- Pan: drag with the left mouse button or one finger (release to fling)
- Zoom: mouse wheel or pinch, anchored at the cursor
- Quit: ESC or close window

Usage:
    python viewer.py --config config.json --svg globe.svg --marker "2.35,48.86,Paris"
================================================================================
"""
import argparse
import json
import logging
import logging.config
import os
import sys

import pygame

from world_map import config as DEFAULTS
from world_map.runtime import EventDispatcher, FrameScheduler, HeaderBar, InteractionMode, MapController, SkyColorEngine
from world_map.sampler import TerrainSampler

# --- Application Constants (Rule 1) ---
DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_LOG_CONFIG_PATH = "logging_config.json"
LOG_DIR = "logs"
SCREEN_WIDTH = 1280
SCREEN_HEIGHT = 720
CLOCK_TICK_RATE = 60


def parse_marker(text: str) -> tuple:
    """Parses 'lng,lat,label' (the label may itself contain commas)."""
    parts = text.split(",", 2)
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(f"Marker '{text}' must look like 'lng,lat,label'.")
    try:
        longitude, latitude = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Marker '{text}' has a non-numeric coordinate.")
    if not -90 <= latitude <= 90:
        raise argparse.ArgumentTypeError(f"Marker latitude {latitude} is outside [-90, 90].")
    label = parts[2].strip() if len(parts) == 3 else ""
    return longitude, latitude, label


class MapViewerApp:
    """The main application class for the world map viewer."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH, log_config_path: str = DEFAULT_LOG_CONFIG_PATH,
                 svg_path: str = None, seed: int = None, markers: list = None):
        self._setup_logging(log_config_path)
        self.logger.info("Application starting.")

        self.config = self._load_config(config_path)
        if svg_path is not None:
            self.config.setdefault('map', {})['svg_path'] = svg_path
        if seed is not None:
            self.config.setdefault('terrain', {})['seed'] = seed

        self._setup_pygame()

        # --- Components ---
        camera_config = self.config.get('camera', {})
        self.header = HeaderBar(height=camera_config.get('header_height', DEFAULTS.HEADER_HEIGHT_PX))
        self.sky_engine = SkyColorEngine(self.config.get('sky', {}), header=self.header)
        self.sky_colors = None

        self.dispatcher = EventDispatcher()
        self.scheduler = FrameScheduler()
        self.controller = MapController(
            self.screen,
            self.dispatcher,
            config=camera_config,
            scheduler=self.scheduler,
            on_gesture_end=self.sky_engine.reset_debounce,
            header_height=self.header.height,
        )
        for longitude, latitude, label in markers or ():
            self.controller.draw_marker(longitude, latitude, label)

        self.asset_loaded = False
        self.is_running = True
        self._cursor_mode = None

    def _setup_logging(self, log_config_path: str):
        """Initializes the logging system from a config file, or a basic console setup."""
        if not os.path.exists(log_config_path):
            logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
            self.logger = logging.getLogger(__name__)
            self.logger.warning(f"Logging config '{log_config_path}' not found; using basic console logging.")
            return

        os.makedirs(LOG_DIR, exist_ok=True)
        with open(log_config_path, 'rt') as f:
            log_config = json.load(f)

        # Keep the log file location independent of the JSON contents.
        file_handler = log_config.get('handlers', {}).get('file')
        if file_handler is not None:
            file_handler['filename'] = os.path.join(LOG_DIR, 'viewer.log')

        logging.config.dictConfig(log_config)
        self.logger = logging.getLogger(__name__)

    def _load_config(self, config_path: str) -> dict:
        """Loads viewer parameters from the config file."""
        self.logger.info(f"Loading configuration from {config_path}")
        try:
            with open(config_path, 'r') as f:
                return json.load(f)
        except FileNotFoundError:
            self.logger.critical(f"Configuration file not found at {config_path}. Exiting.")
            sys.exit(1)
        except json.JSONDecodeError:
            self.logger.critical(f"Error decoding JSON from {config_path}. Exiting.")
            sys.exit(1)

    def _setup_pygame(self):
        """Initializes Pygame and the display window."""
        self.logger.info("Initializing Pygame...")
        pygame.init()
        display_config = self.config.get('display', {})
        width = display_config.get('screen_width', SCREEN_WIDTH)
        height = display_config.get('screen_height', SCREEN_HEIGHT)

        if display_config.get('fullscreen', False):
            self.logger.info("Initializing display in Fullscreen mode.")
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            self.logger.info(f"Initializing display in Windowed mode ({width}x{height}).")
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        pygame.display.set_caption(display_config.get('caption', DEFAULTS.HEADER_TITLE))
        self.clock = pygame.time.Clock()
        self.tick_rate = display_config.get('clock_tick_rate', CLOCK_TICK_RATE)

    def _load_asset(self):
        """Reads and samples the map document. Runs once, after the first frame."""
        svg_path = self.config.get('map', {}).get('svg_path', DEFAULTS.DEFAULT_MAP_PATH)
        sampler = TerrainSampler(config=self.config.get('terrain', {}), logger=self.logger)
        asset = sampler.load(svg_path)
        self.controller.set_asset(asset)
        self.asset_loaded = True

    def run(self):
        """The main application loop."""
        while self.is_running:
            dt_seconds = self.clock.tick(self.tick_rate) / 1000.0
            self.handle_events()
            self.update(dt_seconds)
            self.draw()
            if not self.asset_loaded:
                self._load_asset()

        self.logger.info("Exiting viewer.")
        self.controller.destroy()
        pygame.quit()
        sys.exit()

    def handle_events(self):
        """Processes window events and forwards input to the map."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.is_running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.is_running = False
            elif event.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.get_surface()
                self.controller.resize(self.screen)
            self.dispatcher.dispatch(event)

    def update(self, dt_seconds: float):
        """Advances animations and recomputes the sky color for the view center."""
        if self.asset_loaded:
            longitude = self.controller.center_longitude()
            self.sky_colors = self.sky_engine.get_smooth_sky_colors(longitude, self.sky_colors)
            self.sky_engine.apply_colors(self.sky_colors)
        self.header.update(dt_seconds)
        self._update_cursor()

    def _update_cursor(self):
        mode = self.controller.state.mode
        if mode == self._cursor_mode:
            return
        self._cursor_mode = mode
        cursor = pygame.SYSTEM_CURSOR_SIZEALL if mode == InteractionMode.DRAGGING else pygame.SYSTEM_CURSOR_HAND
        try:
            pygame.mouse.set_system_cursor(cursor)
        except pygame.error as e:
            self.logger.debug(f"Cursor change unsupported: {e}")

    def draw(self):
        """Handles all rendering for the application."""
        self.controller.tick()
        self.header.draw(self.screen)
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Interactive world map viewer with terrain icons and sky colors.")
    parser.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH,
                        help="Path to the JSON configuration file.")
    parser.add_argument("--svg", type=str, default=None,
                        help="Map document to load (overrides map.svg_path in the config).")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for terrain sampling (overrides terrain.seed in the config).")
    parser.add_argument("--log-config", type=str, default=DEFAULT_LOG_CONFIG_PATH,
                        help="Path to the JSON logging configuration.")
    parser.add_argument("--marker", type=parse_marker, action="append", default=[],
                        help="Marker as 'lng,lat,label'. May be repeated.")
    args = parser.parse_args()

    app = MapViewerApp(
        config_path=args.config,
        log_config_path=args.log_config,
        svg_path=args.svg,
        seed=args.seed,
        markers=args.marker,
    )
    app.run()


if __name__ == '__main__':
    main()
