"""
Digest email delivery via SMTP.

Uses Python's built-in smtplib with STARTTLS so it works with any
SMTP provider: Gmail App Passwords, SendGrid, Mailgun, etc.

Gmail setup:
  1. Enable 2-Step Verification on your Google account.
  2. Generate an App Password (Google Account → Security → App Passwords).
  3. Set EMAIL_USER=you@gmail.com and EMAIL_PASS=<app-password> in .env.
"""

from __future__ import annotations

import asyncio
import smtplib
from datetime import UTC, datetime
from email.mime.text import MIMEText

from x_news_agent.agent.state import RunLog
from x_news_agent.core.config import Settings
from x_news_agent.core.errors import NotifyError
from x_news_agent.core.logging import get_logger
from x_news_agent.schemas.schemas import NewsItem

logger = get_logger(__name__)


def _stories(count: int) -> str:
    return "story" if count == 1 else "stories"


def group_by_category(news_items: list[NewsItem]) -> dict[str, list[NewsItem]]:
    """Group items by category, categories in order of first appearance."""
    groups: dict[str, list[NewsItem]] = {}
    for item in news_items:
        groups.setdefault(item.category, []).append(item)
    return groups


def render_digest(
    news_items: list[NewsItem],
    posts_processed: int,
    now: datetime | None = None,
) -> str:
    now = now or datetime.now(UTC)
    sections = []
    for category, items in group_by_category(news_items).items():
        entries = "\n".join(
            f"• {item.headline}\n"
            f"  {item.summary}\n"
            f"  Source: @{item.original_post.author_username}\n"
            for item in items
        )
        sections.append(
            f"{category.upper()} ({len(items)} {_stories(len(items))})\n"
            f"{'-' * (len(category) + 10)}\n\n"
            f"{entries}"
        )

    return (
        f"Your X Timeline News Digest - {now:%Y-%m-%d}\n\n"
        + "\n".join(sections)
        + "\n---\n"
        "Generated by your X News Agent\n"
        f"Total items analyzed: {posts_processed}\n"
        f"News items found: {len(news_items)}\n"
        f"Generated at: {now:%Y-%m-%d %H:%M:%S %Z}\n"
    )


def digest_subject(count: int) -> str:
    return f"Your X News Digest - {count} {_stories(count)}"


class EmailService:
    def __init__(self, settings: Settings, run_log: RunLog):
        self.settings = settings
        self.run_log = run_log

    def _send(self, msg: MIMEText, recipients: list[str]) -> None:
        """Open SMTP connection, send, close. Raises on failure."""
        s = self.settings
        with smtplib.SMTP(s.email_host, s.email_port, timeout=30) as smtp:
            smtp.ehlo()
            smtp.starttls()
            smtp.ehlo()
            if s.email_user and s.email_pass:
                smtp.login(s.email_user, s.email_pass)
            smtp.sendmail(s.email_user, recipients, msg.as_string())

    async def send_digest(self, news_items: list[NewsItem], posts_processed: int) -> None:
        """Email the digest to USER_EMAIL. Raises NotifyError."""
        if not news_items:
            raise ValueError("send_digest needs at least one news item")

        self.run_log.add("Generating email digest...", "info")
        recipient = self.settings.user_email

        msg = MIMEText(render_digest(news_items, posts_processed), "plain", "utf-8")
        msg["Subject"] = digest_subject(len(news_items))
        msg["From"] = self.settings.email_user
        msg["To"] = recipient

        try:
            await asyncio.to_thread(self._send, msg, [recipient])
        except (smtplib.SMTPException, OSError) as e:
            self.run_log.add(f"Email error: {e}", "error")
            logger.error("email_send_error", error=str(e))
            raise NotifyError(str(e)) from e

        self.run_log.add(f"Email sent to {recipient}", "success")
        logger.info("digest_sent", recipient=recipient, items=len(news_items))
