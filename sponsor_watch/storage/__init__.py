"""Storage components for Sponsor Watch."""

from .schedules import ScheduleStore, parse_send_time

__all__ = ["ScheduleStore", "parse_send_time"]
