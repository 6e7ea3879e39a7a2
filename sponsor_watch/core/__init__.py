"""Core domain models and interfaces for Sponsor Watch."""

from .models import Schedule, Frequency, VideoItem, Classification, DetectionResult, RunSummary
from .exceptions import (
    SponsorWatchError,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    ChannelResolutionError,
    ChannelFetchError,
    YouTubeAPIError,
    DeliveryError
)

__all__ = [
    "Schedule",
    "Frequency",
    "VideoItem",
    "Classification",
    "DetectionResult",
    "RunSummary",
    "SponsorWatchError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ChannelResolutionError",
    "ChannelFetchError",
    "YouTubeAPIError",
    "DeliveryError"
]
