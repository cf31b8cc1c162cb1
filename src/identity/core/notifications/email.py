"""Email transport using the Resend API."""

import html
from dataclasses import dataclass

import resend

from src.identity.core.config import get_settings
from src.identity.core.logging import get_logger, loggable_email

logger = get_logger(__name__)

_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_CODE_STYLE = (
    "font-size: 32px; font-weight: 700; letter-spacing: 8px; "
    "background: #f3f4f6; padding: 16px 24px; border-radius: 6px; display: inline-block;"
)
_LINK_STYLE = "color: #2563eb; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"


@dataclass(frozen=True, slots=True)
class EmailMessage:
    to: str
    subject: str
    html: str


def send_email(message: EmailMessage) -> None:
    """Send one email synchronously. Raises on transport errors.

    Without RESEND_API_KEY the message is logged instead (dev mode).
    """
    settings = get_settings()
    if not settings.resend_api_key:
        logger.warning(
            "RESEND_API_KEY not set - email not sent",
            to=loggable_email(message.to),
            subject=message.subject,
        )
        return

    resend.api_key = settings.resend_api_key
    resend.Emails.send(
        {
            "from": settings.email_from,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
    )


def _wrap(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">{title}</h1>
{body}
</body>
</html>"""


def _code_email_html(title: str, intro: str, code: str, ttl_minutes: int) -> str:
    safe_code = html.escape(code)
    return _wrap(
        title,
        f"""    <p>{intro}</p>
    <p style="margin: 32px 0;"><span style="{_CODE_STYLE}">{safe_code}</span></p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This code expires in {ttl_minutes} minutes. If you didn't request it,
        you can safely ignore this email.
    </p>""",
    )


def build_verification_email(to: str, code: str) -> EmailMessage:
    ttl = get_settings().email_verification_code_ttl_minutes
    return EmailMessage(
        to=to,
        subject="Your email verification code",
        html=_code_email_html(
            "Verify your email", "Use this code to verify your email address:", code, ttl
        ),
    )


def build_password_reset_email(to: str, code: str) -> EmailMessage:
    ttl = get_settings().password_reset_code_ttl_minutes
    return EmailMessage(
        to=to,
        subject="Your password reset code",
        html=_code_email_html(
            "Reset your password", "Use this code to choose a new password:", code, ttl
        ),
    )


def build_invitation_email(to: str, invitation_link: str) -> EmailMessage:
    settings = get_settings()
    safe_link = html.escape(invitation_link, quote=True)
    safe_app_name = html.escape(settings.app_name)
    return EmailMessage(
        to=to,
        subject=f"You've been invited to administer {settings.app_name}",
        html=_wrap(
            "You're invited!",
            f"""    <p>You have been invited to join <strong>{safe_app_name}</strong> as an admin.</p>
    <p style="margin: 32px 0;">
        <a href="{safe_link}" style="{_BUTTON_STYLE}">Accept Invitation</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{safe_link}" style="{_LINK_STYLE}">{safe_link}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This invitation will expire in {settings.invite_expire_days} days.
    </p>""",
        ),
    )
