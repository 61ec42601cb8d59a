"""
Config Watcher

Background service that reloads the YAML config file when it changes.

Key responsibilities:
- Poll the config file modification time
- Re-apply log level and format
- Swap the tracked driver name set
- Rebuild the tracer provider

Runs in a background thread, checks every 5 seconds by default.
"""

import threading
import time
import logging
from pathlib import Path
from typing import Callable, Optional

from shared.logging_config import update_log_settings
from topology.config import DriverNameSet, Settings, load_settings
from topology.tracing import Tracing

logger = logging.getLogger(__name__)


class ConfigWatcher:
    """
    Reload settings when the config file changes.
    Runs in background thread.
    """

    def __init__(
        self,
        settings: Settings,
        driver_names: DriverNameSet,
        interval_seconds: float = 5,
        loader: Callable[[Optional[str]], Settings] = load_settings,
        component_name: str = "topology",
        tracing: Optional[Tracing] = None,
    ):
        """
        Initialize config watcher.

        Args:
            settings: Settings currently in effect
            driver_names: Driver name set to update on reload
            interval_seconds: How often to check the file (default 5s)
            loader: Settings loader, called with the config file path
            component_name: Logging component name for re-applied formats
            tracing: Tracer provider holder rebuilt on reload
        """
        self.settings = settings
        self.driver_names = driver_names
        self.interval = interval_seconds
        self.loader = loader
        self.component_name = component_name
        self.tracing = tracing

        self.running = False
        self.watch_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._last_mtime = self._mtime()

        logger.info(f"Config watcher initialized: file={settings.config_file}, interval={interval_seconds}s")

    def _mtime(self) -> Optional[float]:
        try:
            return Path(self.settings.config_file).stat().st_mtime
        except OSError:
            return None

    def start(self):
        """Start config watcher in background thread"""
        if self.running:
            logger.warning("Config watcher already running")
            return

        self.running = True
        self._stop_event.clear()
        self.watch_thread = threading.Thread(target=self._watch_loop, daemon=True)
        self.watch_thread.start()

        logger.info("Config watcher started")

    def stop(self):
        """Stop config watcher"""
        if not self.running:
            return

        self.running = False
        self._stop_event.set()

        if self.watch_thread and self.watch_thread.is_alive():
            self.watch_thread.join(timeout=5)

        logger.info("Config watcher stopped")

    def _watch_loop(self):
        """Main polling loop (runs in background thread)"""
        while self.running:
            try:
                self.check_once()
            except Exception as e:
                logger.error(f"Config reload error: {e}", exc_info=True)

            self._stop_event.wait(self.interval)

    def check_once(self) -> bool:
        """
        Reload if the config file changed since the last check.

        Returns:
            True when new settings were applied
        """
        mtime = self._mtime()
        if mtime is None or mtime == self._last_mtime:
            return False
        self._last_mtime = mtime

        started = time.perf_counter()
        try:
            new_settings = self.loader(self.settings.config_file)
        except Exception as e:
            logger.error(f"Failed to reload {self.settings.config_file}; keeping previous settings: {e}")
            return False

        self.apply(new_settings)
        logger.info(f"Configuration updated from {self.settings.config_file} in {(time.perf_counter() - started) * 1000:.1f}ms")
        return True

    def apply(self, new_settings: Settings) -> None:
        """Apply reloadable settings: logging, tracked drivers and tracing."""
        update_log_settings(self.component_name, new_settings.log_level, new_settings.log_format)
        self.driver_names.replace(new_settings.driver_names)
        if self.tracing is not None:
            self.tracing.configure(new_settings)
        self.settings = new_settings
