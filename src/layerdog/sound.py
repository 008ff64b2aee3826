"""Sound-event gate: decide whether a violation or hover event should play a sound.

Playback itself is delegated to a caller-supplied *player*; this module only
applies the ``soundConfiguration`` switches and the per-event debounce.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from layerdog.rules.models import SoundConfiguration

logger = logging.getLogger(__name__)


class SoundEvent(str, enum.Enum):
    TOOLTIP_HOVER = "tooltip_hover"
    INSPECTION_FOUND = "inspection_found"
    VIOLATION_CREATED = "violation_created"


class AudioPlaybackError(Exception):
    """Raised by players that fail to play a sound."""


class SoundNotifier:
    """Forwards enabled, non-debounced events to a player.

    The player is called as ``player(sound_file, volume)``; an empty
    ``sound_file`` means the system default sound.
    """

    def __init__(
        self,
        config_provider: Callable[[], SoundConfiguration],
        player: Callable[[str, float], None] | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config_provider = config_provider
        self._player = player
        self._clock = clock
        self._last_played: dict[SoundEvent, float] = {}
        self._lock = threading.Lock()

    def should_play(self, event: SoundEvent, config: SoundConfiguration) -> bool:
        if not config.enabled:
            return False
        if event is SoundEvent.TOOLTIP_HOVER:
            return config.play_on_hover
        return config.play_on_inspection

    def notify(self, event: SoundEvent) -> bool:
        """Play the configured sound for *event*. Returns True if it was played."""
        config = self._config_provider()
        if not self.should_play(event, config):
            return False

        now = self._clock()
        with self._lock:
            last = self._last_played.get(event)
            if last is not None and (now - last) * 1000 < config.debounce_ms:
                return False
            self._last_played[event] = now

        if self._player is None:
            logger.debug("No sound player configured, dropping %s", event.value)
            return False

        try:
            self._player(config.sound_file, config.volume)
        except (AudioPlaybackError, OSError) as exc:
            logger.warning("Failed to play LayerDog sound: %s", exc)
            return False
        return True
