"""Debounced background writes to the autosave slot."""
from __future__ import annotations

import copy
import logging
import threading

from epq.data.save_slots import AUTO_SAVE_SLOT
from epq.domain.state import GameState
from epq.services.errors import SaveLoadError
from epq.services.save_service import SaveService

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_DELAY = 0.5


class AutoSaveScheduler:
    """Coalesces bursts of state changes into a single autosave write.

    Every ``schedule`` call restarts the countdown with a fresh snapshot, so
    only the last state of a burst reaches disk.
    """

    def __init__(
        self,
        save_service: SaveService,
        delay: float = DEFAULT_AUTOSAVE_DELAY,
        enabled: bool = True,
    ) -> None:
        self._save_service = save_service
        self._delay = delay
        self.enabled = enabled
        self._lock = threading.Lock()
        # Held for the whole of a disk write.
        self._write_lock = threading.Lock()
        self._generation = 0
        self._timer: threading.Timer | None = None
        self._snapshot: GameState | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self, state: GameState) -> None:
        if not self.enabled:
            return
        snapshot = copy.deepcopy(state)
        with self._lock:
            self._drop_timer()
            self._snapshot = snapshot
            timer = threading.Timer(self._delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Drop any pending write and wait for one already on its way to disk."""
        with self._lock:
            self._drop_timer()
            self._snapshot = None
        with self._write_lock:
            pass

    def flush(self) -> bool:
        """Write the pending snapshot now; return False when nothing was pending."""
        with self._write_lock:
            with self._lock:
                self._drop_timer()
                snapshot, self._snapshot = self._snapshot, None
            if snapshot is None:
                return False
            return self._write(snapshot)

    def _drop_timer(self) -> None:
        # Caller holds self._lock. Bumping the generation invalidates timers
        # that already fired but have not taken the lock yet.
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None

    def _fire(self, generation: int) -> None:
        with self._write_lock:
            with self._lock:
                if generation != self._generation:
                    return
                self._timer = None
                snapshot, self._snapshot = self._snapshot, None
            if snapshot is not None:
                self._write(snapshot)

    def _write(self, snapshot: GameState) -> bool:
        try:
            self._save_service.save(AUTO_SAVE_SLOT, snapshot)
        except (OSError, SaveLoadError) as exc:
            logger.warning("Autosave failed: %s", exc)
            return False
        logger.debug("Autosaved scene %s", snapshot.current_scene_id)
        return True
