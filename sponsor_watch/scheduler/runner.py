"""Fire-and-forget execution of analysis runs."""

import asyncio
from datetime import datetime, timezone
from typing import Set

from sponsor_watch.core.interfaces import IAnalysisPipeline
from sponsor_watch.core.models import Schedule, RunSummary
from sponsor_watch.core.exceptions import DeliveryError


class RunLauncher:
    """
    Launches one asyncio task per run.

    Callers get the task back immediately and are never expected to await it.
    Every outcome, including failures, ends up in the log; no exception
    escapes a launched task.
    """

    def __init__(self, pipeline: IAnalysisPipeline, logger=None):
        self.pipeline = pipeline
        self.logger = logger
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def _run_logged(self, schedule: Schedule) -> RunSummary:
        try:
            summary = await self.pipeline.run(schedule)
        except DeliveryError as e:
            summary = e.summary or RunSummary(schedule_id=schedule.id, schedule_name=schedule.name)
            summary.error = summary.error or str(e)
            if self.logger:
                self.logger.error(f"Run for schedule '{schedule.name}' failed: {e}")
        except Exception as e:
            summary = RunSummary(
                schedule_id=schedule.id,
                schedule_name=schedule.name,
                error=str(e),
                finished_at=datetime.now(timezone.utc)
            )
            if self.logger:
                self.logger.error(f"Run for schedule '{schedule.name}' crashed: {e}", exc_info=True)
        return summary

    def launch(self, schedule: Schedule) -> "asyncio.Task[RunSummary]":
        """Start a run on the running event loop and return without waiting."""
        task = asyncio.get_running_loop().create_task(
            self._run_logged(schedule.snapshot()),
            name=f"run-{schedule.id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight run to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
