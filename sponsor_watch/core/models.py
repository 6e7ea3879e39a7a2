"""Core data models for Sponsor Watch."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from enum import Enum


class Frequency(str, Enum):
    """Trigger cadence of a schedule."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass
class Schedule:
    """A named monitoring configuration."""
    id: str
    name: str
    api_key: str
    channels: List[str]
    emails: List[str]
    frequency: Optional[str] = Frequency.WEEKLY.value
    send_time: str = "09:00"
    weeks: int = 4
    active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def snapshot(self) -> "Schedule":
        """Return an independent copy for a single run."""
        return replace(self, channels=list(self.channels), emails=list(self.emails))

    def to_dict(self) -> Dict[str, Any]:
        """Convert schedule to a display dictionary with the API key masked."""
        return {
            "id": self.id,
            "name": self.name,
            "api_key": f"{self.api_key[:4]}…" if self.api_key else "",
            "channels": list(self.channels),
            "weeks": self.weeks,
            "frequency": self.frequency,
            "send_time": self.send_time,
            "emails": list(self.emails),
            "active": self.active,
            "created_at": self.created_at.isoformat(),
        }

    def __str__(self) -> str:
        """String representation of schedule."""
        return f"Schedule(id={self.id}, name={self.name})"


@dataclass
class VideoItem:
    """A video returned by the video source."""
    video_id: str
    title: str
    description: str
    published_at: datetime

    @property
    def url(self) -> str:
        """Public watch URL of the video."""
        return f"https://www.youtube.com/watch?v={self.video_id}"


@dataclass
class Classification:
    """Outcome of sponsor classification for one video."""
    is_sponsor: bool
    links: List[str] = field(default_factory=list)


@dataclass
class DetectionResult:
    """One sponsored video found during a run."""
    channel: str
    title: str
    published_at: datetime
    links: List[str]
    video_url: str


@dataclass
class RunSummary:
    """Result of one analysis run."""
    schedule_id: str
    schedule_name: str
    count: int = 0
    channels_processed: int = 0
    skipped_channels: List[str] = field(default_factory=list)
    failed_channels: Dict[str, str] = field(default_factory=dict)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def is_successful(self) -> bool:
        """A run fails only when its report could not be delivered."""
        return self.error is None

    @property
    def duration(self) -> Optional[float]:
        """Get run duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def __str__(self) -> str:
        """String representation of summary."""
        if self.is_successful:
            return f"RunSummary(schedule={self.schedule_name}, count={self.count})"
        return f"RunSummary(schedule={self.schedule_name}, count={self.count}, error={self.error})"
