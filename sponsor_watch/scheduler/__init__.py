"""Scheduler module for recurring sponsor reports."""

from .runner import RunLauncher
from .triggers import TriggerRegistry, Cadence, cadence_for, build_trigger
from .engine import SponsorWatchEngine, build_pipeline

__all__ = [
    "RunLauncher",
    "TriggerRegistry",
    "Cadence",
    "cadence_for",
    "build_trigger",
    "SponsorWatchEngine",
    "build_pipeline"
]
