"""Background scheduler for the periodic credit bonus."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import Session

from hackbank.cache import PlayerDirectoryCache
from hackbank.domain.rules_config import DEFAULT_RULES, EconomyRules
from hackbank.models import utc_now
from hackbank.services.bonus_service import BonusService, cycle_for
from hackbank.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class BonusScheduler:
    """Fixed-delay loop that grants the bonus once per interval.

    Each cycle runs in a worker thread with its own session. Cycles never
    overlap, and the cycle key is derived from the wall clock so a restarted
    scheduler does not pay a cycle twice.
    """

    MIN_INTERVAL_SECONDS = 0.1

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        interval_seconds: float,
        rules: EconomyRules = DEFAULT_RULES,
        cache: PlayerDirectoryCache | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._interval = max(interval_seconds, self.MIN_INTERVAL_SECONDS)
        self._rules = rules
        self._cache = cache
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._cycle_lock = asyncio.Lock()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def current_cycle(self) -> int:
        return cycle_for(self._clock(), self._interval)

    def start(self) -> None:
        """Start the loop on the running event loop; no-op if already running."""
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run_loop(), name="hackbank-bonus-loop")

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        await task
        self._task = None

    async def run_now(self, cycle: int | None = None) -> int:
        """Grant the bonus for ``cycle`` (default: the current one) immediately."""
        cycle = self.current_cycle() if cycle is None else cycle
        async with self._cycle_lock:
            return await asyncio.to_thread(self._grant_sync, cycle)

    async def _run_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
                    break
                except TimeoutError:
                    pass
                await self._run_cycle()
        finally:
            self._task = None

    async def _run_cycle(self) -> None:
        try:
            await self.run_now()
        except Exception:
            logger.exception("bonus cycle failed; retrying on the next interval")

    def _grant_sync(self, cycle: int) -> int:
        session = self._session_factory()
        try:
            service = BonusService(
                session, LedgerService(session), rules=self._rules, cache=self._cache
            )
            return service.grant_bonus(cycle)
        finally:
            session.close()
