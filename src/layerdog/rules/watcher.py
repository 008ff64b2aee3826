"""Background watcher that reloads the rules file when it changes on disk.

Uses ``watchfiles`` to block on filesystem notifications for the directory
holding ``layer-rules.json``.  Runs on a single daemon thread for the life of
the owning :class:`~layerdog.rules.store.RuleStore`.
"""

from __future__ import annotations

import importlib.util
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from watchfiles import Change

logger = logging.getLogger(__name__)

# Wait after a change before re-reading, so a half-written file is not parsed.
SETTLE_DELAY_SECONDS = 0.1

# watchfiles' own batching window (ms); kept short, the settle delay does the rest.
DEFAULT_DEBOUNCE_MS = 50


class ConfigWatchError(Exception):
    """Raised when the rules directory cannot be watched."""


def _has_watchfiles() -> bool:
    return importlib.util.find_spec("watchfiles") is not None


def is_rules_change(changes: Iterable[tuple[Change, str]], file_name: str) -> bool:
    """Return True if *changes* contains an add/modify of *file_name*."""
    from watchfiles import Change

    # Editors that save via rename produce "added" for the final name.
    reload_changes = {Change.added, Change.modified}
    for change_type, path_str in changes:
        if Path(path_str).name == file_name and change_type in reload_changes:
            return True
    return False


class RuleFileWatcher:
    """Watches one rules file and calls *on_change* after it is rewritten."""

    def __init__(
        self,
        path: Path,
        on_change: Callable[[], None],
        *,
        settle_delay: float = SETTLE_DELAY_SECONDS,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self.path = path
        self._on_change = on_change
        self._settle_delay = settle_delay
        self._debounce_ms = debounce_ms
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the watcher thread.

        Raises :class:`ConfigWatchError` when the directory is missing or
        ``watchfiles`` is not importable.
        """
        if self.is_running:
            return
        if not _has_watchfiles():
            msg = "watchfiles is not installed"
            raise ConfigWatchError(msg)
        if not self.path.parent.is_dir():
            msg = f"rules directory does not exist: {self.path.parent}"
            raise ConfigWatchError(msg)

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="layerdog-rules-watcher",
            daemon=True,
        )
        self._thread.start()
        logger.info("Watching %s for rule changes", self.path)

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                logger.warning("Rules watcher thread did not exit within 5 seconds")
            self._thread = None

    def handle_changes(self, changes: Iterable[tuple[Change, str]]) -> bool:
        """Process one batch of filesystem changes.

        Returns True when the batch touched the rules file and *on_change*
        was called.
        """
        if not is_rules_change(changes, self.path.name):
            return False

        logger.info("Rule configuration file changed, reloading...")
        # wait() doubles as the settle delay and returns early on stop().
        if self._stop_event.wait(self._settle_delay):
            return False
        self._on_change()
        return True

    def _watch_loop(self) -> None:
        from watchfiles import watch

        try:
            for changes in watch(
                self.path.parent,
                stop_event=self._stop_event,
                debounce=self._debounce_ms,
                recursive=False,
                raise_interrupt=False,
            ):
                if self._stop_event.is_set():
                    break
                try:
                    self.handle_changes(changes)
                except Exception:
                    logger.exception("Reloading layer rules failed")
        except Exception:
            logger.exception("Rule file watching disabled: watching %s failed", self.path.parent)
        logger.debug("Rules watcher thread exiting")
