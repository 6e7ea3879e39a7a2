"""Configuration management for Sponsor Watch."""

from .settings import AppConfig, YouTubeConfig, SmtpConfig, SchedulerConfig, LoggingConfig
from .schedules import load_schedule_definitions

__all__ = [
    "AppConfig",
    "YouTubeConfig",
    "SmtpConfig",
    "SchedulerConfig",
    "LoggingConfig",
    "load_schedule_definitions"
]
