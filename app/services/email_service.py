import logging
import re
from typing import List, Union

import requests

from app.config import settings

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"
EMAIL_PATTERN = re.compile(r"[^@]+@[^@]+\.[^@]+")


def valid_recipients(to: Union[str, List[str]]) -> List[str]:
    recipients = to if isinstance(to, list) else [to]
    return [email for email in recipients if email and EMAIL_PATTERN.match(email)]


def send_email(to: Union[str, List[str]], subject: str, html: str) -> bool:
    """
    Send an email through Brevo.

    Never raises: delivery problems are logged and reported as ``False`` so a
    failed mail does not fail the request that triggered it.
    """
    recipients = valid_recipients(to)
    if not recipients:
        logger.warning(f"No valid emails found: {to}")
        return False

    if not settings.brevo_api_key:
        logger.warning(f"Brevo not configured, skipping '{subject}' to {recipients}")
        return False

    try:
        response = requests.post(
            BREVO_API_URL,
            json={
                "sender": {"email": settings.mail_from, "name": settings.store_name},
                "to": [{"email": email} for email in recipients],
                "subject": subject,
                "htmlContent": html,
            },
            headers={
                "api-key": settings.brevo_api_key,
                "Content-Type": "application/json",
            },
            timeout=10,
        )
    except requests.RequestException:
        logger.exception(f"Brevo email to {recipients} failed")
        return False

    if response.status_code >= 400:
        logger.error(f"Brevo email failed ({response.status_code}): {response.text}")
        return False

    logger.info(f"Brevo email '{subject}' sent to {recipients}")
    return True


OTP_MESSAGES = {
    "VERIFY": ("verify your email", "Use this code to verify your email address:"),
    "RESET": ("reset your password", "Use this code to reset your password:"),
}


def send_otp_email(email: str, code: str, otp_type: str) -> bool:
    subject, intro = OTP_MESSAGES.get(otp_type, OTP_MESSAGES["VERIFY"])
    html = (
        f"<p>{intro}</p>"
        f"<h2 style=\"letter-spacing:4px\">{code}</h2>"
        f"<p>The code expires in {settings.otp_token_expire_minutes} minutes.</p>"
    )
    return send_email(to=email, subject=f"{settings.store_name}: {subject}", html=html)
