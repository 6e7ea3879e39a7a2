"""Abstract base classes and interfaces for Sponsor Watch."""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from datetime import datetime

from .models import Schedule, VideoItem, DetectionResult, RunSummary


class IVideoSource(ABC):
    """Interface for the video search provider."""

    @abstractmethod
    async def resolve_channel(self, name: str, api_key: str) -> Optional[str]:
        """Resolve a channel display name to a channel id, or None."""
        pass

    @abstractmethod
    async def list_recent_videos(
        self,
        channel_id: str,
        api_key: str,
        after: datetime,
        limit: int = 50,
        order: str = "date"
    ) -> List[VideoItem]:
        """List a channel's videos published after the cutoff."""
        pass

    @abstractmethod
    async def verify_api_key(self, api_key: str) -> Tuple[bool, str]:
        """Check that an API key is accepted by the provider."""
        pass


class INotifier(ABC):
    """Interface for report delivery."""

    @abstractmethod
    async def send(self, schedule: Schedule, report: str, count: int) -> None:
        """Deliver a report to the schedule's recipients."""
        pass


class IAnalysisPipeline(ABC):
    """Interface for one schedule's fetch/classify/export/notify run."""

    @abstractmethod
    async def collect(self, schedule: Schedule) -> Tuple[List[DetectionResult], RunSummary]:
        """Fetch and classify every channel of the schedule."""
        pass

    @abstractmethod
    async def run(self, schedule: Schedule) -> RunSummary:
        """Run the full pipeline and deliver the report."""
        pass
