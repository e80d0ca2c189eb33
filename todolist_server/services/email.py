# Copyright (C) 2024 TodoList Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Email sending service. Reports failure instead of raising."""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import quote

from todolist_server.config import settings

logger = logging.getLogger(__name__)


def smtp_configured() -> bool:
    return bool(settings.smtp_host and settings.smtp_user)


def wrap_body_html(plain_body: str, link: str | None = None) -> str:
    """Wrap plain text body in minimal HTML, with an optional button link."""
    body_escaped = plain_body.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace("\n", "<br>\n")
    button = ""
    if link:
        button = (
            f'<p><a href="{link}" style="display: inline-block; background-color: #007bff; color: white; '
            f'padding: 12px 24px; text-decoration: none; border-radius: 5px;">Reset Password</a></p>'
        )
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; color: #333; max-width: 600px;">
<div style="white-space: pre-wrap;">{body_escaped}</div>
{button}
</body>
</html>"""


def _deliver(to: str, msg: MIMEMultipart) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
        server.starttls()
        server.login(settings.smtp_user, settings.smtp_password or "")
        server.sendmail(settings.smtp_from, [to], msg.as_string())


async def send_email(to: str, subject: str, body: str, link: str | None = None) -> bool:
    """Send an email (plain and HTML). Returns True only if SMTP accepted it."""
    if not smtp_configured():
        logger.info("Email not sent (SMTP not configured): To=%s Subject=%s", to, subject)
        return False
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from
    msg["To"] = to
    msg.attach(MIMEText(body, "plain"))
    msg.attach(MIMEText(wrap_body_html(body, link), "html"))
    try:
        await asyncio.to_thread(_deliver, to, msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Failed to send email to %s: %s", to, e)
        return False
    return True


def reset_url(token: str) -> str:
    base = (settings.app_base_url or "http://localhost:5000").rstrip("/")
    return f"{base}/auth?token={quote(token)}"


async def send_password_reset_email(email: str, token: str) -> bool:
    """Email the reset link for ``token``. Returns delivery success."""
    url = reset_url(token)
    minutes = settings.reset_token_expire_minutes
    body = (
        "You requested a password reset for your TodoList account.\n\n"
        f"Open this link to choose a new password:\n{url}\n\n"
        f"This link will expire in {minutes} minutes.\n\n"
        "If you didn't request this password reset, please ignore this email."
    )
    return await send_email(email, "Password Reset Request", body, link=url)
