"""Pytest configuration and shared fixtures."""

import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest
import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from sponsor_watch.config.settings import (
    AppConfig,
    YouTubeConfig,
    SmtpConfig,
    SchedulerConfig,
    LoggingConfig,
)
from sponsor_watch.core.interfaces import IVideoSource, INotifier
from sponsor_watch.core.models import Schedule, VideoItem, DetectionResult, RunSummary
from sponsor_watch.services.classifier import SponsorClassifier
from sponsor_watch.services.report import ReportFormatter
from sponsor_watch.services.pipeline import AnalysisPipeline
from sponsor_watch.scheduler.runner import RunLauncher
from sponsor_watch.scheduler.triggers import TriggerRegistry
from sponsor_watch.storage.schedules import ScheduleStore


TAIPEI = ZoneInfo("Asia/Taipei")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_config(temp_dir: Path) -> AppConfig:
    """Create a mock configuration for testing."""
    return AppConfig(
        youtube=YouTubeConfig(
            api_url="https://youtube.test/v3/",
            request_timeout=5.0,
            max_results=50,
        ),
        smtp=SmtpConfig(
            host="smtp.test.local",
            port=465,
            use_ssl=True,
            username="reports@test.local",
            password="secret",
            sender_name="YouTube 業配系統",
            timeout=5.0,
        ),
        scheduler=SchedulerConfig(
            enabled=True,
            timezone="Asia/Taipei",
            misfire_grace_time=60,
        ),
        logging=LoggingConfig(
            level="DEBUG",
            format="text",
            file=temp_dir / "test.log",
        ),
    )


@pytest.fixture
def schedule_fields() -> dict:
    """Valid input for ScheduleStore.create."""
    return {
        "name": "Tech channels",
        "apiKey": "test-api-key",
        "channels": ["Channel A", "Channel B"],
        "weeks": 2,
        "frequency": "weekly",
        "sendTime": "08:30",
        "emails": ["a@test.local", "b@test.local"],
    }


@pytest.fixture
def sample_schedule() -> Schedule:
    """Create a sample Schedule for testing."""
    return Schedule(
        id="schedule-123",
        name="Tech channels",
        api_key="test-api-key",
        channels=["Channel A", "Channel B"],
        emails=["a@test.local"],
        frequency="daily",
        send_time="09:00",
        weeks=4,
        active=True,
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def video_factory():
    """Build VideoItems published on a given day of March 2024."""
    def make_video(video_id: str, title: str, description: str = "", day: int = 1) -> VideoItem:
        return VideoItem(
            video_id=video_id,
            title=title,
            description=description,
            published_at=datetime(2024, 3, day, 4, 0, tzinfo=timezone.utc),
        )
    return make_video


@pytest.fixture
def sample_detection() -> DetectionResult:
    """Create a sample DetectionResult for testing."""
    return DetectionResult(
        channel="Channel A",
        title="My Review (業配)",
        published_at=datetime(2024, 3, 5, 1, 0, tzinfo=timezone.utc),
        links=["https://x.co/a", "https://x.co/b"],
        video_url="https://www.youtube.com/watch?v=abc123",
    )


@pytest.fixture
def mock_video_source() -> AsyncMock:
    """Create a mock video source."""
    mock = AsyncMock(spec=IVideoSource)
    mock.resolve_channel.return_value = None
    mock.list_recent_videos.return_value = []
    return mock


@pytest.fixture
def mock_notifier() -> AsyncMock:
    """Create a mock notifier."""
    mock = AsyncMock(spec=INotifier)
    mock.send.return_value = None
    return mock


@pytest.fixture
def mock_logger() -> MagicMock:
    """Create a mock logger."""
    return MagicMock()


@pytest.fixture
def pipeline(mock_video_source, mock_notifier, mock_logger) -> AnalysisPipeline:
    """Create an AnalysisPipeline over mocked collaborators."""
    return AnalysisPipeline(
        video_source=mock_video_source,
        classifier=SponsorClassifier(),
        formatter=ReportFormatter(TAIPEI),
        notifier=mock_notifier,
        logger=mock_logger,
    )


@pytest.fixture
def mock_pipeline(sample_schedule) -> AsyncMock:
    """Create a mock pipeline whose runs succeed."""
    mock = AsyncMock()
    mock.run.return_value = RunSummary(
        schedule_id=sample_schedule.id,
        schedule_name=sample_schedule.name,
        count=0,
    )
    return mock


@pytest.fixture
def scheduler() -> AsyncIOScheduler:
    """An AsyncIOScheduler that is never started; jobs stay pending."""
    return AsyncIOScheduler(timezone=TAIPEI)


@pytest.fixture
def launcher(mock_pipeline, mock_logger) -> RunLauncher:
    return RunLauncher(mock_pipeline, mock_logger)


@pytest.fixture
def registry(scheduler, launcher, mock_logger) -> TriggerRegistry:
    return TriggerRegistry(scheduler, launcher, timezone=TAIPEI, logger=mock_logger)


@pytest.fixture
def store(registry, mock_logger) -> ScheduleStore:
    return ScheduleStore(registry, mock_logger)


@pytest.fixture
def restore_logging():
    """Undo root logger and structlog changes made by setup_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
