"""CSV export of detection results."""

import csv
import io
from datetime import datetime, tzinfo
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from sponsor_watch.core.models import DetectionResult


BOM = "\ufeff"
REPORT_COLUMNS = ("頻道", "影片標題", "發布日期", "業配連結", "影片網址")
LINK_SEPARATOR = " | "
NO_LINK_PLACEHOLDER = "（無連結）"


def format_locale_date(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """Render a date in zh-TW short form, e.g. 2024/3/5."""
    if tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    return f"{value.year}/{value.month}/{value.day}"


class ReportFormatter:
    """
    Formats detection results as a spreadsheet-friendly CSV document.

    Every field is quoted and embedded quotes are doubled. The output starts
    with a byte-order mark so that spreadsheet tools pick UTF-8 for the
    Chinese column names and titles.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or ZoneInfo("Asia/Taipei")

    def _row(self, result: DetectionResult) -> tuple:
        links = LINK_SEPARATOR.join(result.links) if result.links else NO_LINK_PLACEHOLDER
        return (
            result.channel,
            result.title,
            format_locale_date(result.published_at, self.tz),
            links,
            result.video_url,
        )

    def format(self, results: Iterable[DetectionResult]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(REPORT_COLUMNS)
        for result in results:
            writer.writerow(self._row(result))
        return BOM + buffer.getvalue()
