"""Analysis pipeline: fetch, classify, export and notify for one schedule."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sponsor_watch.core.interfaces import IAnalysisPipeline, IVideoSource, INotifier
from sponsor_watch.core.models import Schedule, DetectionResult, RunSummary
from sponsor_watch.core.exceptions import DeliveryError
from sponsor_watch.services.classifier import SponsorClassifier
from sponsor_watch.services.report import ReportFormatter


MAX_VIDEOS_PER_CHANNEL = 50


class AnalysisPipeline(IAnalysisPipeline):
    """Runs one schedule's channels through the video source and classifier."""

    def __init__(
        self,
        video_source: IVideoSource,
        classifier: SponsorClassifier,
        formatter: ReportFormatter,
        notifier: INotifier,
        max_videos: int = MAX_VIDEOS_PER_CHANNEL,
        logger=None
    ):
        """Initialize pipeline with its collaborators."""
        self.video_source = video_source
        self.classifier = classifier
        self.formatter = formatter
        self.notifier = notifier
        self.max_videos = max_videos
        self.logger = logger

    @staticmethod
    def cutoff_for(schedule: Schedule, now: Optional[datetime] = None) -> datetime:
        """Start of the lookback window."""
        now = now or datetime.now(timezone.utc)
        return now - timedelta(days=(schedule.weeks or 4) * 7)

    async def _process_channel(
        self,
        schedule: Schedule,
        channel: str,
        cutoff: datetime
    ) -> Optional[List[DetectionResult]]:
        """Return the channel's sponsored videos, or None if it did not resolve."""
        channel_id = await self.video_source.resolve_channel(channel, schedule.api_key)
        if not channel_id:
            if self.logger:
                self.logger.warning(f"Channel not found, skipping: {channel}")
            return None

        videos = await self.video_source.list_recent_videos(
            channel_id,
            schedule.api_key,
            after=cutoff,
            limit=self.max_videos,
            order="date"
        )

        detections = []
        for video in videos:
            verdict = self.classifier.classify(video.title, video.description)
            if verdict.is_sponsor:
                detections.append(DetectionResult(
                    channel=channel,
                    title=video.title,
                    published_at=video.published_at,
                    links=verdict.links,
                    video_url=video.url
                ))
        return detections

    async def collect(self, schedule: Schedule) -> Tuple[List[DetectionResult], RunSummary]:
        """Fetch and classify every channel; a failing channel never stops the others."""
        summary = RunSummary(schedule_id=schedule.id, schedule_name=schedule.name)
        cutoff = self.cutoff_for(schedule, summary.started_at)
        results: List[DetectionResult] = []

        for channel in schedule.channels:
            try:
                detections = await self._process_channel(schedule, channel, cutoff)
            except Exception as e:
                summary.failed_channels[channel] = str(e)
                if self.logger:
                    self.logger.error(f"Failed to analyze channel '{channel}': {e}")
                continue

            if detections is None:
                summary.skipped_channels.append(channel)
                continue

            summary.channels_processed += 1
            results.extend(detections)

        summary.count = len(results)
        return results, summary

    async def run(self, schedule: Schedule) -> RunSummary:
        """Run the full pipeline and deliver the report."""
        if self.logger:
            self.logger.info(f"Starting analysis for schedule '{schedule.name}' ({schedule.id})")

        results, summary = await self.collect(schedule)
        report = self.formatter.format(results)

        try:
            await self.notifier.send(schedule, report, summary.count)
        except Exception as e:
            summary.error = str(e)
            summary.finished_at = datetime.now(timezone.utc)
            if isinstance(e, DeliveryError):
                e.summary = summary
                raise
            raise DeliveryError(
                f"Report delivery failed for '{schedule.name}': {e}",
                recipients=list(schedule.emails),
                summary=summary
            ) from e

        summary.finished_at = datetime.now(timezone.utc)
        if self.logger:
            self.logger.info(
                f"Schedule '{schedule.name}' finished: {summary.count} sponsored videos, "
                f"{len(summary.failed_channels)} channels failed, "
                f"{len(summary.skipped_channels)} channels not found"
            )
        return summary
