"""
Search Engine - Debounced free-text filter over the type catalog.

Keystrokes only record the time and mark the pending search as not yet
executed. The host calls ``tick()`` on every non-key event; once the input
has been quiet for ``quiet_interval`` seconds, one filter pass runs. A burst
of keystrokes therefore costs exactly one pass after it ends.

With no filter text the engine lists the whole catalog. In both modes,
instantiated single-instance types are dropped under the HIDDEN policy and
kept (but flagged non-interactive) under DISABLED.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, List, Optional, Tuple

from asset_creator.core.events import BusEvent, EventBus, EventType
from asset_creator.core.logging_utils import get_module_logger
from asset_creator.core.settings import SettingsStore, Visibility
from asset_creator.core.single_instance import SingleInstanceTracker
from asset_creator.core.type_catalog import TypeCatalog, TypeDescriptor

QUIET_INTERVAL = 0.1


class SearchState(Enum):
    IDLE = "idle"
    FILTERING = "filtering"


class SearchEngine:

    def __init__(
        self,
        catalog: TypeCatalog,
        tracker: SingleInstanceTracker,
        settings: SettingsStore,
        bus: EventBus,
        *,
        quiet_interval: float = QUIET_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.logger = get_module_logger("SearchEngine")
        self._catalog = catalog
        self._tracker = tracker
        self._settings = settings
        self._bus = bus
        self._quiet_interval = quiet_interval
        self._clock = clock

        self._text = ""
        self._last_keystroke = float("-inf")
        self._executed = True
        self._results: List[TypeDescriptor] = []
        self._passes = 0
        self._subscribed = False

        self.subscribe()
        self._run_pass()

    # =========================================================================
    # Bus wiring
    # =========================================================================

    def subscribe(self) -> None:
        if self._subscribed:
            return
        self._bus.subscribe(EventType.CATALOG_REBUILT, self._on_invalidated)
        self._bus.subscribe(EventType.SINGLE_INSTANCE_VISIBILITY_CHANGED, self._on_invalidated)
        self._subscribed = True

    def unsubscribe(self) -> None:
        if not self._subscribed:
            return
        self._bus.unsubscribe(EventType.CATALOG_REBUILT, self._on_invalidated)
        self._bus.unsubscribe(EventType.SINGLE_INSTANCE_VISIBILITY_CHANGED, self._on_invalidated)
        self._subscribed = False

    def _on_invalidated(self, message: BusEvent) -> None:
        self.refresh()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def text(self) -> str:
        return self._text

    @property
    def state(self) -> SearchState:
        return SearchState.FILTERING if self._text else SearchState.IDLE

    @property
    def results(self) -> Tuple[TypeDescriptor, ...]:
        return tuple(self._results)

    @property
    def pending(self) -> bool:
        """True while a keystroke burst has not been filtered yet."""
        return not self._executed

    @property
    def pass_count(self) -> int:
        return self._passes

    def is_interactive(self, descriptor: TypeDescriptor) -> bool:
        return not self._tracker.is_instantiated(descriptor)

    # =========================================================================
    # Input
    # =========================================================================

    def on_key_event(self, text: Optional[str] = None) -> None:
        """Record a keystroke; ``text`` is the field's content after it, if known."""
        if text is not None:
            self._text = text
        self._last_keystroke = self._clock()
        self._executed = False

    def set_text(self, text: str) -> None:
        self.on_key_event(text)

    def tick(self) -> bool:
        """Run the pending filter pass once the input has been quiet long enough."""
        if self._executed:
            return False
        if self._clock() - self._last_keystroke <= self._quiet_interval:
            return False

        self._run_pass()
        self._executed = True
        return True

    def refresh(self) -> None:
        """Re-derive results now (after a catalog rebuild or policy change)."""
        self._run_pass()

    # =========================================================================
    # Filtering
    # =========================================================================

    def _run_pass(self) -> None:
        needle = self._text.strip().lower()
        hide_instantiated = self._settings.single_instance_visibility is Visibility.HIDDEN

        results: List[TypeDescriptor] = []
        # Blank but non-empty text matches nothing
        candidates = () if self._text and not needle else self._catalog
        for descriptor in candidates:
            if needle and needle not in descriptor.name.lower():
                continue
            if hide_instantiated and self._tracker.is_instantiated(descriptor):
                continue
            results.append(descriptor)

        self._results = results
        self._passes += 1
        self.logger.debug(
            "Search pass %d (%s, %r): %d results",
            self._passes, self.state.value, needle, len(results)
        )


__all__ = ['SearchEngine', 'SearchState', 'QUIET_INTERVAL']
