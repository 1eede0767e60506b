"""Read-through cache for player directory listings.

Each listing is a named view (:class:`~hackbank.domain.enums.CacheView`)
keyed by its query parameters. Every view declares the
:class:`~hackbank.domain.enums.DirectoryEvent` values that can make it stale;
services report committed writes through :meth:`PlayerDirectoryCache.invalidate_for`
and only the affected views are dropped.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass, field
from typing import Any

from hackbank.domain.enums import CacheView, DirectoryEvent

logger = logging.getLogger(__name__)

_EVERY_CHANGE = frozenset(DirectoryEvent)

VIEW_TRIGGERS: Mapping[CacheView, frozenset[DirectoryEvent]] = {
    CacheView.ACTIVE: _EVERY_CHANGE,
    CacheView.ACTIVE_RANKED: _EVERY_CHANGE,
    # Hack targets carry no balance or role.
    CacheView.ACTIVE_EXCEPT: frozenset(
        {
            DirectoryEvent.REGISTERED,
            DirectoryEvent.STATUS_CHANGED,
            DirectoryEvent.PROFILE_EDITED,
            DirectoryEvent.RANK_CHANGED,
        }
    ),
    CacheView.ALL_EXCEPT: _EVERY_CHANGE,
}


@dataclass(slots=True)
class _ViewState:
    generation: int = 0
    entries: dict[Hashable, Any] = field(default_factory=dict)


class PlayerDirectoryCache:
    """Thread-safe store of named, independently invalidated listings."""

    def __init__(
        self, triggers: Mapping[CacheView, frozenset[DirectoryEvent]] = VIEW_TRIGGERS
    ) -> None:
        self._triggers = dict(triggers)
        self._views: dict[CacheView, _ViewState] = {view: _ViewState() for view in self._triggers}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def triggers_for(self, view: CacheView) -> frozenset[DirectoryEvent]:
        """Return the events that invalidate ``view``."""

        return self._triggers[view]

    def views_affected_by(self, event: DirectoryEvent) -> set[CacheView]:
        return {view for view, events in self._triggers.items() if event in events}

    def get_or_load(self, view: CacheView, key: Hashable, loader: Callable[[], Any]) -> Any:
        """Return the cached value for ``(view, key)``, loading it on a miss.

        A value loaded while an invalidation of the same view happened is
        returned to the caller but not stored.
        """

        with self._lock:
            state = self._views[view]
            if key in state.entries:
                self.hits += 1
                logger.debug("cache hit view=%s key=%r", view, key)
                return state.entries[key]
            self.misses += 1
            generation = state.generation

        logger.debug("cache miss view=%s key=%r, loading from database", view, key)
        value = loader()

        with self._lock:
            if state.generation == generation:
                state.entries[key] = value
        return value

    def is_cached(self, view: CacheView, key: Hashable) -> bool:
        with self._lock:
            return key in self._views[view].entries

    def invalidate(self, *views: CacheView) -> None:
        """Drop every entry of the given views."""

        with self._lock:
            for view in views:
                state = self._views[view]
                state.entries.clear()
                state.generation += 1

    def invalidate_for(self, *events: DirectoryEvent) -> set[CacheView]:
        """Drop the views triggered by any of ``events`` and return them."""

        affected: set[CacheView] = set()
        for event in events:
            affected |= self.views_affected_by(event)
        if affected:
            self.invalidate(*affected)
            logger.debug("invalidated %s after %s", sorted(affected), sorted(events))
        return affected

    def clear(self) -> None:
        """Drop every view."""

        self.invalidate(*self._views)
        logger.info("All directory caches cleared.")
