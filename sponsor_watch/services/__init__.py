"""Services for Sponsor Watch."""

from .youtube import YouTubeService
from .classifier import SponsorClassifier
from .report import ReportFormatter
from .notifier import EmailNotifier
from .pipeline import AnalysisPipeline

__all__ = ["YouTubeService", "SponsorClassifier", "ReportFormatter", "EmailNotifier", "AnalysisPipeline"]
