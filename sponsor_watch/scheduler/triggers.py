"""Recurring cron triggers bound to schedules."""

import threading
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Dict, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.job import Job
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from sponsor_watch.core.models import Schedule, Frequency
from sponsor_watch.storage.schedules import parse_send_time
from sponsor_watch.scheduler.runner import RunLauncher


@dataclass(frozen=True)
class Cadence:
    """When a schedule's trigger fires, in the reference time zone."""
    frequency: Frequency
    hour: int
    minute: int

    def cron_fields(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"hour": self.hour, "minute": self.minute}
        if self.frequency == Frequency.WEEKLY:
            fields["day_of_week"] = "mon"
        elif self.frequency == Frequency.MONTHLY:
            fields["day"] = 1
        return fields

    def describe(self) -> str:
        at = f"{self.hour:02d}:{self.minute:02d}"
        if self.frequency == Frequency.DAILY:
            return f"every day at {at}"
        if self.frequency == Frequency.MONTHLY:
            return f"1st of every month at {at}"
        return f"every Monday at {at}"


def cadence_for(frequency: Optional[str], send_time: Optional[str], logger=None) -> Cadence:
    """
    Map a schedule's frequency and send time to a cadence.

    daily fires every day, weekly every Monday and monthly on the 1st.
    Anything else falls back to weekly.
    """
    hour, minute = parse_send_time(send_time or "09:00")
    try:
        resolved = Frequency(frequency)
    except ValueError:
        if logger:
            logger.warning(f"Unknown frequency {frequency!r}, falling back to weekly")
        resolved = Frequency.WEEKLY
    return Cadence(frequency=resolved, hour=hour, minute=minute)


def build_trigger(cadence: Cadence, timezone: tzinfo) -> CronTrigger:
    return CronTrigger(timezone=timezone, **cadence.cron_fields())


@dataclass
class TriggerBinding:
    """A schedule bound to its single live job."""
    schedule: Schedule
    cadence: Cadence
    trigger: CronTrigger
    job: Job


class TriggerRegistry:
    """
    Owns the one recurring trigger of each schedule.

    All access to the binding map goes through a single lock, and install
    removes any previous job for the same schedule before adding the new one.
    A fired trigger only launches a run; it never waits for it, and a failed
    run leaves the binding untouched.
    """

    def __init__(
        self,
        scheduler: BaseScheduler,
        launcher: RunLauncher,
        timezone: tzinfo,
        misfire_grace_time: int = 300,
        logger=None
    ):
        self.scheduler = scheduler
        self.launcher = launcher
        self.timezone = timezone
        self.misfire_grace_time = misfire_grace_time
        self.logger = logger
        self._bindings: Dict[str, TriggerBinding] = {}
        self._lock = threading.Lock()

    def _remove_job(self, job: Job) -> None:
        try:
            self.scheduler.remove_job(job.id)
        except JobLookupError:
            pass

    def install(self, schedule: Schedule) -> TriggerBinding:
        """Install (or replace) the trigger for a schedule."""
        cadence = cadence_for(schedule.frequency, schedule.send_time, self.logger)
        trigger = build_trigger(cadence, self.timezone)

        with self._lock:
            previous = self._bindings.pop(schedule.id, None)
            if previous:
                self._remove_job(previous.job)

            job = self.scheduler.add_job(
                self._fire_job,
                trigger=trigger,
                args=[schedule.id],
                id=schedule.id,
                name=f"Sponsor report: {schedule.name}",
                coalesce=True,
                max_instances=1,
                misfire_grace_time=self.misfire_grace_time,
                replace_existing=True
            )
            binding = TriggerBinding(schedule=schedule, cadence=cadence, trigger=trigger, job=job)
            self._bindings[schedule.id] = binding

        if self.logger:
            action = "Replaced" if previous else "Installed"
            self.logger.info(f"{action} trigger for '{schedule.name}': {cadence.describe()}")
        return binding

    def cancel(self, schedule_id: str) -> bool:
        """Cancel a schedule's trigger. Returns False if none was installed."""
        with self._lock:
            binding = self._bindings.pop(schedule_id, None)
            if binding is None:
                return False
            self._remove_job(binding.job)

        if self.logger:
            self.logger.info(f"Cancelled trigger for '{binding.schedule.name}'")
        return True

    def fire(self, schedule_id: str) -> bool:
        """Handle a trigger firing. Returns True if a run was launched."""
        with self._lock:
            binding = self._bindings.get(schedule_id)

        if binding is None:
            if self.logger:
                self.logger.warning(f"Trigger fired for unknown schedule {schedule_id}")
            return False

        schedule = binding.schedule
        if not schedule.active:
            if self.logger:
                self.logger.info(f"Schedule '{schedule.name}' is paused, skipping run")
            return False

        self.launcher.launch(schedule)
        return True

    async def _fire_job(self, schedule_id: str) -> None:
        self.fire(schedule_id)

    def has_trigger(self, schedule_id: str) -> bool:
        with self._lock:
            return schedule_id in self._bindings

    def get_binding(self, schedule_id: str) -> Optional[TriggerBinding]:
        with self._lock:
            return self._bindings.get(schedule_id)

    def next_fire_time(self, schedule_id: str, now: Optional[datetime] = None) -> Optional[datetime]:
        binding = self.get_binding(schedule_id)
        if binding is None:
            return None
        now = now or datetime.now(self.timezone)
        return binding.trigger.get_next_fire_time(None, now)

    def shutdown(self) -> None:
        """Cancel every trigger."""
        with self._lock:
            bindings = list(self._bindings.values())
            self._bindings.clear()
            for binding in bindings:
                self._remove_job(binding.job)

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)
