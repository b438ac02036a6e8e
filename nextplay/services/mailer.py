# nextplay/services/mailer.py
"""Transactional email through the Brevo HTTP API."""
import logging
from html import escape

import httpx

from nextplay import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


def send_email(to: str, subject: str, html_content: str) -> bool:
    """
    Returns False when no API key is configured (the message is only logged),
    True once Brevo accepted it. Raises EmailDeliveryError otherwise.
    """
    if not settings.BREVO_API_KEY:
        logger.info("email not sent (BREVO_API_KEY unset): to=%s subject=%r", to, subject)
        return False

    payload = {
        "sender": {"name": settings.SENDER_NAME, "email": settings.SENDER_EMAIL},
        "to": [{"email": to}],
        "subject": subject,
        "htmlContent": html_content,
    }
    try:
        response = httpx.post(
            settings.BREVO_API_URL,
            json=payload,
            headers={"api-key": settings.BREVO_API_KEY},
            timeout=10.0,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error("Brevo rejected email to %s: %s - %s", to, e.response.status_code, e.response.text)
        raise EmailDeliveryError("Error sending email") from e
    except httpx.RequestError as e:
        logger.error("Brevo request failed for %s: %s", to, e)
        raise EmailDeliveryError("Error sending email") from e

    logger.info("email sent to %s: %r", to, subject)
    return True


def _layout(title: str, body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<div style="background: #3b82f6; padding: 20px; text-align: center;">'
        '<h1 style="color: white; margin: 0;">Next Play Recovery</h1></div>'
        f'<div style="padding: 30px; background: #f9fafb;"><h2>{escape(title)}</h2>{body}</div>'
        "</div>"
    )


def _button(url: str, label: str) -> str:
    return (
        f'<p style="text-align: center; margin: 30px 0;"><a href="{escape(url)}" '
        'style="background: #3b82f6; color: white; padding: 12px 30px; text-decoration: none; '
        f'border-radius: 6px;">{escape(label)}</a></p>'
        f'<p style="font-size: 14px; word-break: break-all;">{escape(url)}</p>'
    )


def send_verification_email(to: str, token: str) -> bool:
    url = f"{settings.BASE_URL}/verify-email?token={token}"
    body = (
        "<p>Thank you for registering with Next Play Recovery! "
        "Please verify your email address:</p>" + _button(url, "Verify Email Address")
    )
    return send_email(to, "Verify your Next Play Recovery account", _layout("Verify Your Email Address", body))


def send_password_reset_email(to: str, token: str) -> bool:
    url = f"{settings.BASE_URL}/reset-password?token={token}"
    body = (
        "<p>We received a request to reset your password. This link expires in one hour.</p>"
        + _button(url, "Reset Password")
        + "<p>If you did not request a reset, you can ignore this email.</p>"
    )
    return send_email(to, "Reset your Next Play Recovery password", _layout("Reset Your Password", body))


def send_welcome_email(to: str, name: str) -> bool:
    body = (
        f"<p>Hi {escape(name or 'there')}, your email is verified. "
        "Add your children and start tracking their recovery.</p>"
        + _button(f"{settings.BASE_URL}/dashboard", "Go to Dashboard")
    )
    return send_email(to, "Welcome to Next Play Recovery", _layout("Welcome!", body))


def send_injury_reminder_email(to: str, parent_name: str, child_name: str, injury_type: str, injury_id: str) -> bool:
    url = f"{settings.BASE_URL}/injuries/{injury_id}"
    body = (
        f"<p>Hi {escape(parent_name or 'there')}, it has been a few days since "
        f"{escape(child_name)}'s {escape(injury_type)} was last updated. "
        "How is the recovery going?</p>" + _button(url, "Update Recovery Status")
    )
    return send_email(to, f"Recovery check-in for {child_name}", _layout("Recovery Check-in", body))
