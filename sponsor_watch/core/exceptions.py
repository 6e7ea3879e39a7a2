"""Custom exceptions for Sponsor Watch."""

from typing import Optional, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from sponsor_watch.core.models import RunSummary


class SponsorWatchError(Exception):
    """Base exception for all custom errors in the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize exception with message and optional details."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """String representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(SponsorWatchError):
    """Raised when there are configuration issues."""
    pass


class ValidationError(SponsorWatchError):
    """Raised when schedule input is malformed."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        """Initialize validation error."""
        details = kwargs.get('details', {})
        if field:
            details['field'] = field
        super().__init__(message, details)
        self.field = field


class NotFoundError(SponsorWatchError):
    """Raised when a schedule id is unknown."""

    def __init__(self, schedule_id: str, **kwargs):
        """Initialize not-found error."""
        details = kwargs.get('details', {})
        details['schedule_id'] = schedule_id
        super().__init__(f"Schedule not found: {schedule_id}", details)
        self.schedule_id = schedule_id


class ChannelResolutionError(SponsorWatchError):
    """Raised when a channel name cannot be resolved to a channel id."""

    def __init__(self, message: str, channel: Optional[str] = None, **kwargs):
        """Initialize channel resolution error."""
        details = kwargs.get('details', {})
        if channel:
            details['channel'] = channel
        super().__init__(message, details)
        self.channel = channel


class ChannelFetchError(SponsorWatchError):
    """Raised when fetching a channel's videos fails."""

    def __init__(self, message: str, channel: Optional[str] = None, **kwargs):
        """Initialize channel fetch error."""
        details = kwargs.get('details', {})
        if channel:
            details['channel'] = channel
        super().__init__(message, details)
        self.channel = channel


class YouTubeAPIError(ChannelFetchError):
    """Raised when YouTube Data API operations fail."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 response_body: Optional[str] = None, **kwargs):
        """Initialize YouTube API error."""
        details = kwargs.get('details', {})
        if status_code:
            details['status_code'] = status_code
        if response_body:
            details['response_body'] = response_body
        super().__init__(message, channel=kwargs.get('channel'), details=details)
        self.status_code = status_code
        self.response_body = response_body


class DeliveryError(SponsorWatchError):
    """Raised when a report cannot be delivered to its recipients."""

    def __init__(self, message: str, recipients: Optional[list] = None,
                 summary: Optional["RunSummary"] = None, **kwargs):
        """Initialize delivery error."""
        details = kwargs.get('details', {})
        if recipients:
            details['recipients'] = recipients
        super().__init__(message, details)
        self.recipients = recipients or []
        self.summary = summary
