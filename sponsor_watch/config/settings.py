"""
Configuration settings for the Sponsor Watch application.

This module defines all configuration models for the application, including:
- YouTube Data API access
- SMTP delivery of reports
- Trigger scheduling
- Logging
"""

import os
from typing import Optional
from pathlib import Path
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class YouTubeConfig:
    """YouTube Data API configuration."""
    api_url: str = "https://www.googleapis.com/youtube/v3"
    request_timeout: float = 30.0
    max_results: int = 50

    def __post_init__(self):
        """Validate and clean configuration."""
        self.api_url = self.api_url.rstrip('/')

    @classmethod
    def from_env(cls) -> "YouTubeConfig":
        """Create config from environment variables."""
        return cls(
            api_url=os.getenv("YOUTUBE_API_URL", "https://www.googleapis.com/youtube/v3"),
            request_timeout=float(os.getenv("YOUTUBE_REQUEST_TIMEOUT", "30")),
            max_results=int(os.getenv("YOUTUBE_MAX_RESULTS", "50"))
        )


@dataclass
class SmtpConfig:
    """SMTP delivery configuration."""
    host: str = "smtp.gmail.com"
    port: int = 465
    use_ssl: bool = True
    username: str = ""
    password: str = ""
    sender_name: str = "YouTube 業配系統"
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "SmtpConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            port=int(os.getenv("SMTP_PORT", "465")),
            use_ssl=_env_bool("SMTP_USE_SSL", "true"),
            username=os.getenv("GMAIL_USER", ""),
            password=os.getenv("GMAIL_PASS", ""),
            sender_name=os.getenv("SMTP_SENDER_NAME", "YouTube 業配系統"),
            timeout=float(os.getenv("SMTP_TIMEOUT", "30"))
        )


@dataclass
class SchedulerConfig:
    """Scheduler configuration."""
    enabled: bool = True
    timezone: str = "Asia/Taipei"
    misfire_grace_time: int = 300

    @classmethod
    def from_env(cls) -> "SchedulerConfig":
        """Create config from environment variables."""
        return cls(
            enabled=_env_bool("SCHEDULER_ENABLED", "true"),
            timezone=os.getenv("SCHEDULER_TIMEZONE", "Asia/Taipei"),
            misfire_grace_time=int(os.getenv("SCHEDULER_MISFIRE_GRACE_TIME", "300"))
        )

    @property
    def tzinfo(self) -> ZoneInfo:
        """Reference time zone used for firing times and report dates."""
        return ZoneInfo(self.timezone)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: Optional[Path] = field(default_factory=lambda: Path("sponsor_watch.log"))

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create config from environment variables."""
        log_file = os.getenv("LOGGING_FILE", "sponsor_watch.log")
        return cls(
            level=os.getenv("LOGGING_LEVEL", "INFO"),
            format=os.getenv("LOGGING_FORMAT", "json"),
            file=Path(log_file) if log_file else None
        )


@dataclass
class AppConfig:
    """Main application configuration."""
    youtube: YouTubeConfig = field(default_factory=YouTubeConfig)
    smtp: SmtpConfig = field(default_factory=SmtpConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load_config(cls) -> "AppConfig":
        """Load configuration from environment variables and .env file."""
        load_dotenv(override=True)

        return cls(
            youtube=YouTubeConfig.from_env(),
            smtp=SmtpConfig.from_env(),
            scheduler=SchedulerConfig.from_env(),
            logging=LoggingConfig.from_env()
        )

    def validate_config(self, require_mail: bool = True) -> list[str]:
        """Validate configuration and return any errors."""
        errors = []

        if require_mail:
            if not self.smtp.username:
                errors.append("GMAIL_USER is required")
            if not self.smtp.password:
                errors.append("GMAIL_PASS is required")

        try:
            self.scheduler.tzinfo
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(f"Unknown SCHEDULER_TIMEZONE: {self.scheduler.timezone}")

        if self.youtube.request_timeout <= 0:
            errors.append("YOUTUBE_REQUEST_TIMEOUT must be positive")
        if not 1 <= self.youtube.max_results <= 50:
            errors.append("YOUTUBE_MAX_RESULTS must be between 1 and 50")

        return errors
