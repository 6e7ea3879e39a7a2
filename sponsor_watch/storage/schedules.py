"""In-memory schedule registry."""

import re
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from sponsor_watch.core.models import Schedule
from sponsor_watch.core.exceptions import ValidationError, NotFoundError


SEND_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

# camelCase keys accepted from JSON clients
FIELD_ALIASES = {
    "apiKey": "api_key",
    "sendTime": "send_time",
    "createdAt": "created_at",
}


def parse_send_time(value: str) -> tuple:
    """Parse HH:MM into (hour, minute)."""
    match = SEND_TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError(f"Invalid send time: {value!r}", field="send_time")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValidationError(f"Invalid send time: {value!r}", field="send_time")
    return hour, minute


def _string_list(value: Any, field: str) -> List[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"'{field}' must be a list of strings", field=field)
    return [v.strip() for v in value if v.strip()]


class ScheduleStore:
    """
    Authoritative registry of schedules for the lifetime of the process.

    Creating a schedule installs its trigger and deleting one cancels it, so
    the trigger registry never holds a binding for an unknown schedule.
    Toggling ``active`` leaves the trigger in place; the fired callback checks
    the flag instead.
    """

    def __init__(self, triggers, logger=None):
        """Initialize an empty store bound to a trigger registry."""
        self.triggers = triggers
        self.logger = logger
        self._schedules: Dict[str, Schedule] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _normalize(fields: Mapping[str, Any]) -> Dict[str, Any]:
        return {FIELD_ALIASES.get(key, key): value for key, value in fields.items()}

    def _validate(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        data = self._normalize(fields)

        for required in ("name", "api_key", "channels", "emails"):
            if not data.get(required):
                raise ValidationError(f"Missing required field: {required}", field=required)

        name = data["name"]
        api_key = data["api_key"]
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("'name' must be a non-empty string", field="name")
        if not isinstance(api_key, str) or not api_key.strip():
            raise ValidationError("'api_key' must be a non-empty string", field="api_key")

        channels = _string_list(data["channels"], "channels")
        emails = _string_list(data["emails"], "emails")
        if not channels:
            raise ValidationError("Missing required field: channels", field="channels")
        if not emails:
            raise ValidationError("Missing required field: emails", field="emails")

        weeks = data.get("weeks") or 4
        if isinstance(weeks, bool) or not isinstance(weeks, int) or weeks < 1:
            raise ValidationError("'weeks' must be a positive integer", field="weeks")

        send_time = data.get("send_time") or "09:00"
        hour, minute = parse_send_time(send_time)

        return {
            "name": name.strip(),
            "api_key": api_key.strip(),
            "channels": channels,
            "emails": emails,
            "weeks": weeks,
            "frequency": data.get("frequency"),
            "send_time": f"{hour:02d}:{minute:02d}",
        }

    def create(self, fields: Mapping[str, Any]) -> Schedule:
        """Validate input, store a new schedule and install its trigger."""
        data = self._validate(fields)
        schedule = Schedule(
            id=str(uuid.uuid4()),
            active=True,
            created_at=datetime.now(timezone.utc),
            **data
        )

        with self._lock:
            self._schedules[schedule.id] = schedule
        try:
            self.triggers.install(schedule)
        except Exception:
            with self._lock:
                self._schedules.pop(schedule.id, None)
            raise

        if self.logger:
            self.logger.info(f"Created schedule '{schedule.name}' ({schedule.id})")
        return schedule

    def get(self, schedule_id: str) -> Schedule:
        with self._lock:
            schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise NotFoundError(schedule_id)
        return schedule

    def list(self) -> List[Schedule]:
        with self._lock:
            return list(self._schedules.values())

    def update_channels(self, schedule_id: str, channels: List[str]) -> Schedule:
        """Replace the channel list; the live trigger sees the change on its next fire."""
        cleaned = _string_list(channels, "channels")
        with self._lock:
            schedule = self._schedules.get(schedule_id)
            if schedule is None:
                raise NotFoundError(schedule_id)
            schedule.channels = cleaned
        return schedule

    def set_active(self, schedule_id: str, active: bool) -> Schedule:
        """Enable or pause a schedule without touching its trigger."""
        if not isinstance(active, bool):
            raise ValidationError("'active' must be true or false", field="active")
        with self._lock:
            schedule = self._schedules.get(schedule_id)
            if schedule is None:
                raise NotFoundError(schedule_id)
            schedule.active = active

        if self.logger:
            state = "resumed" if schedule.active else "paused"
            self.logger.info(f"Schedule '{schedule.name}' {state}")
        return schedule

    def delete(self, schedule_id: str) -> None:
        """Cancel the schedule's trigger, then remove the record."""
        with self._lock:
            if schedule_id not in self._schedules:
                raise NotFoundError(schedule_id)
            self.triggers.cancel(schedule_id)
            schedule = self._schedules.pop(schedule_id)

        if self.logger:
            self.logger.info(f"Deleted schedule '{schedule.name}' ({schedule_id})")

    def __len__(self) -> int:
        with self._lock:
            return len(self._schedules)

    def __contains__(self, schedule_id: str) -> bool:
        with self._lock:
            return schedule_id in self._schedules
