"""
Startup fan-out loader.

Runs every fetch strategy exactly once, concurrently, and writes each
successful dataset into the data store.  The run ends when all strategies
finish, the deadline elapses or ``stop()`` is called; either way the store is
sealed and every strategy is accounted for in the summary.  Failures are
counted and logged, never raised to the caller.

Usage::

    runner = DataInitializationRunner(build_strategies(client), get_data_store())
    summary = await runner.run()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from idr_finance import config
from idr_finance.core.logging import LOAD_CONTEXT_ID, bind_context_id
from idr_finance.data_pipeline.strategies import IdrDataFetcher
from idr_finance.data_store import InMemoryDataStore
from idr_finance.domain.enums import LoaderState
from idr_finance.errors import (
    DeadlineExceeded,
    FetchFailure,
    FinanceDataError,
    InvalidArgumentError,
    LoadCancelled,
)
from idr_finance.metrics import record_load_duration, record_load_result

logger = logging.getLogger(__name__)


@dataclass
class LoadSummary:
    """Accounting of one loader run."""
    success_count: int = 0
    failure_count: int = 0
    timed_out: bool = False
    stopped: bool = False
    loaded: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)   # resource_type → message
    duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count


class DataInitializationRunner:
    """Fan-out loader: NOT_STARTED → RUNNING → COMPLETED, once per instance."""

    def __init__(
        self,
        strategies: Sequence[IdrDataFetcher],
        store: InMemoryDataStore,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        seen: Set[str] = set()
        for strategy in strategies:
            if strategy.resource_type in seen:
                raise InvalidArgumentError(
                    f"Duplicate fetch strategy for resource type: {strategy.resource_type}"
                )
            seen.add(strategy.resource_type)

        self._strategies = list(strategies)
        self._store = store
        self._timeout = timeout_seconds if timeout_seconds is not None else config.DATA_LOAD_TIMEOUT_SECONDS
        self._state = LoaderState.NOT_STARTED
        self._summary = LoadSummary()
        self._run_task: Optional[asyncio.Task] = None
        self._stop_requested = asyncio.Event()

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def summary(self) -> LoadSummary:
        return self._summary

    async def run(self) -> LoadSummary:
        """Load every resource once.  Repeat and concurrent callers share the first run."""
        if self._run_task is None:
            self._run_task = asyncio.ensure_future(self._run())
        return await asyncio.shield(self._run_task)

    async def stop(self) -> None:
        """End the run early.

        Fetches still outstanding are cancelled and recorded as ``LoadCancelled``
        failures; ``run()`` callers receive the summary as usual.  A runner
        stopped before it started finishes immediately when run.
        """
        self._stop_requested.set()
        if self._run_task is not None:
            await asyncio.gather(self._run_task, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run(self) -> LoadSummary:
        self._state = LoaderState.RUNNING
        bind_context_id(LOAD_CONTEXT_ID)  # private to this task and the fetch tasks it spawns
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + self._timeout
        logger.info("Starting data initialization for %d resource types", len(self._strategies))

        tasks: Dict[asyncio.Task, str] = {
            asyncio.create_task(self._load_one(s), name=f"load:{s.resource_type}"): s.resource_type
            for s in self._strategies
        }
        pending: Set[asyncio.Task] = set(tasks)
        stop_waiter = asyncio.ensure_future(self._stop_requested.wait())
        try:
            while pending and not self._stop_requested.is_set():
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                _done, pending = await asyncio.wait(
                    pending | {stop_waiter},
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                pending.discard(stop_waiter)

            if pending and self._stop_requested.is_set():
                self._summary.stopped = True
                self._abandon(pending, tasks, LoadCancelled("Loader stopped before a response arrived"))
            elif pending:
                self._summary.timed_out = True
                logger.error("Data initialization timed out after %.0f seconds", self._timeout)
                self._abandon(pending, tasks, DeadlineExceeded(f"No response within {self._timeout:.0f}s"))
        finally:
            stop_waiter.cancel()
            for task in tasks:
                if not task.done():
                    task.cancel()
            self._store.seal()
            self._state = LoaderState.COMPLETED
            self._summary.duration_seconds = round(loop.time() - started, 3)
            record_load_duration(self._summary.duration_seconds)

        logger.info(
            "Data initialization completed. Success: %d, Failures: %d",
            self._summary.success_count, self._summary.failure_count,
        )
        if self._summary.failure_count > 0:
            logger.warning(
                "Some resources failed to load (%s). Application will continue but some endpoints may not work.",
                ", ".join(sorted(self._summary.errors)),
            )
        return self._summary

    async def _load_one(self, strategy: IdrDataFetcher) -> None:
        resource_type = strategy.resource_type
        try:
            data = await strategy.fetch()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Failed to load data for resource: %s", resource_type, exc_info=exc)
            self._record_failure(resource_type, exc)
            return

        if data is None:
            logger.warning("Received null data for resource: %s", resource_type)
            self._record_failure(resource_type, FetchFailure("Empty response", resource_type=resource_type))
            return

        self._store.write(resource_type, data)
        self._summary.success_count += 1
        self._summary.loaded.append(resource_type)
        record_load_result(resource_type, True)
        logger.info("Successfully loaded data for resource: %s", resource_type)

    def _abandon(
        self,
        pending: Set[asyncio.Task],
        tasks: Dict[asyncio.Task, str],
        failure: FinanceDataError,
    ) -> None:
        """Cancel fetches that are still running and count each one as failed."""
        stalled = sorted(tasks[t] for t in pending)
        logger.error("Abandoning unfinished fetches (%s): %s", ", ".join(stalled), failure)
        for task in pending:
            task.cancel()
            self._record_failure(tasks[task], failure)

    def _record_failure(self, resource_type: str, exc: BaseException) -> None:
        self._summary.failure_count += 1
        self._summary.errors[resource_type] = f"{type(exc).__name__}: {exc}"
        record_load_result(resource_type, False)
