"""Wiring of the schedule execution engine."""

import asyncio
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore

from sponsor_watch.config.settings import AppConfig
from sponsor_watch.core.interfaces import IAnalysisPipeline, IVideoSource, INotifier
from sponsor_watch.core.models import RunSummary
from sponsor_watch.services.youtube import YouTubeService
from sponsor_watch.services.classifier import SponsorClassifier
from sponsor_watch.services.report import ReportFormatter
from sponsor_watch.services.notifier import EmailNotifier
from sponsor_watch.services.pipeline import AnalysisPipeline
from sponsor_watch.storage.schedules import ScheduleStore
from sponsor_watch.scheduler.runner import RunLauncher
from sponsor_watch.scheduler.triggers import TriggerRegistry


def build_pipeline(
    config: AppConfig,
    video_source: Optional[IVideoSource] = None,
    notifier: Optional[INotifier] = None,
    logger=None
) -> AnalysisPipeline:
    """Create the analysis pipeline with the configured collaborators."""
    tz = config.scheduler.tzinfo
    return AnalysisPipeline(
        video_source=video_source or YouTubeService(config.youtube, logger),
        classifier=SponsorClassifier(),
        formatter=ReportFormatter(tz),
        notifier=notifier or EmailNotifier(config.smtp, tz, logger),
        max_videos=config.youtube.max_results,
        logger=logger
    )


class SponsorWatchEngine:
    """
    Owns the schedule store, trigger registry, run launcher and scheduler
    for the lifetime of one process.
    """

    def __init__(self, config: AppConfig, pipeline: Optional[IAnalysisPipeline] = None, logger=None):
        """Initialize engine components; nothing runs until start()."""
        self.config = config
        self.logger = logger
        self.pipeline = pipeline or build_pipeline(config, logger=logger)

        self.scheduler = AsyncIOScheduler(
            jobstores={'default': MemoryJobStore()},
            job_defaults={'coalesce': True, 'max_instances': 1},
            timezone=config.scheduler.tzinfo
        )
        self.launcher = RunLauncher(self.pipeline, logger)
        self.triggers = TriggerRegistry(
            self.scheduler,
            self.launcher,
            timezone=config.scheduler.tzinfo,
            misfire_grace_time=config.scheduler.misfire_grace_time,
            logger=logger
        )
        self.store = ScheduleStore(self.triggers, logger)

    def start(self) -> None:
        """Start firing triggers. Must be called with a running event loop."""
        if not self.scheduler.running:
            self.scheduler.start()
            if self.logger:
                self.logger.info(
                    f"Scheduler started with {len(self.triggers)} triggers "
                    f"({self.config.scheduler.timezone})"
                )

    def run_now(self, schedule_id: str) -> "asyncio.Task[RunSummary]":
        """Launch an on-demand run and return immediately."""
        schedule = self.store.get(schedule_id)
        if self.logger:
            self.logger.info(f"On-demand run requested for '{schedule.name}'")
        return self.launcher.launch(schedule)

    async def shutdown(self, wait_for_runs: bool = True) -> None:
        """Stop the scheduler and optionally let in-flight runs finish."""
        self.triggers.shutdown()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            # AsyncIOScheduler stops on the next loop iteration
            await asyncio.sleep(0)
        if wait_for_runs:
            await self.launcher.drain()
        video_source = getattr(self.pipeline, "video_source", None)
        if isinstance(video_source, YouTubeService):
            await video_source.close()
