"""Email delivery of sponsor reports."""

import asyncio
import html
import smtplib
from datetime import datetime, tzinfo
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional
from zoneinfo import ZoneInfo

from sponsor_watch.core.interfaces import INotifier
from sponsor_watch.core.models import Schedule
from sponsor_watch.core.exceptions import DeliveryError, ConfigurationError
from sponsor_watch.config.settings import SmtpConfig
from sponsor_watch.services.report import format_locale_date


SUMMARY_TEMPLATE = """
<div style="font-family:sans-serif;max-width:600px;margin:0 auto;">
  <h2 style="color:#e63030;">📊 YouTube 業配分析報告</h2>
  <p><b>排程名稱：</b>{name}</p>
  <p><b>分析期間：</b>近 {weeks} 週</p>
  <p><b>監控頻道：</b>{channels}</p>
  <p><b>找到業配：</b>{count} 筆</p>
  <p><b>產生時間：</b>{generated_at}</p>
  <hr style="margin:20px 0;">
  <p style="color:#888;font-size:0.85em;">詳細資料請見附件 CSV 檔，可用 Excel 開啟</p>
</div>
"""


class EmailNotifier(INotifier):
    """Sends the CSV report and a short HTML summary over SMTP."""

    def __init__(self, config: SmtpConfig, tz: Optional[tzinfo] = None, logger=None):
        """Initialize notifier with SMTP configuration."""
        self.config = config
        self.tz = tz or ZoneInfo("Asia/Taipei")
        self.logger = logger

    def build_message(self, schedule: Schedule, report: str, count: int,
                      now: Optional[datetime] = None) -> EmailMessage:
        """Compose the report email for a schedule."""
        now = (now or datetime.now(self.tz)).astimezone(self.tz)
        date_str = format_locale_date(now)

        message = EmailMessage()
        message["From"] = formataddr((self.config.sender_name, self.config.username))
        message["To"] = ", ".join(schedule.emails)
        message["Subject"] = f"📊 {schedule.name} 業配報告 — {date_str}（共 {count} 筆）"

        body = SUMMARY_TEMPLATE.format(
            name=html.escape(schedule.name),
            weeks=schedule.weeks,
            channels=html.escape("、".join(schedule.channels)),
            count=count,
            generated_at=now.strftime("%Y/%m/%d %H:%M:%S"),
        )
        message.set_content(f"{schedule.name} 業配報告：共 {count} 筆，詳見附件 CSV 檔。")
        message.add_alternative(body, subtype="html")
        message.add_attachment(
            report.encode("utf-8"),
            maintype="text",
            subtype="csv",
            filename=f"業配報告_{schedule.name}_{now:%Y-%m-%d}.csv",
        )
        return message

    def _deliver(self, message: EmailMessage) -> None:
        """Blocking SMTP delivery."""
        if self.config.use_ssl:
            smtp = smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=self.config.timeout)
        else:
            smtp = smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout)
        with smtp:
            if not self.config.use_ssl:
                smtp.starttls()
            smtp.login(self.config.username, self.config.password)
            smtp.send_message(message)

    async def send(self, schedule: Schedule, report: str, count: int) -> None:
        """Deliver a report to the schedule's recipients."""
        if not self.config.username or not self.config.password:
            raise ConfigurationError("SMTP credentials are not configured")

        message = self.build_message(schedule, report, count)

        # smtplib is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(
                loop.run_in_executor(None, self._deliver, message),
                timeout=self.config.timeout
            )
        except asyncio.TimeoutError:
            raise DeliveryError(
                f"Report delivery timed out after {self.config.timeout}s",
                recipients=list(schedule.emails)
            )
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(
                f"Report delivery failed: {str(e)}",
                recipients=list(schedule.emails)
            )

        if self.logger:
            self.logger.info(
                f"Sent report for '{schedule.name}' to {len(schedule.emails)} recipients ({count} results)"
            )
