"""
Email service for dispute invitations via Gmail SMTP.
"""

import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from datetime import datetime
from typing import Dict, Any, Optional

from odr_api.config.settings import Settings, get_settings
from odr_api.models.dispute import DisputeResponse
from odr_api.models.party import DisputePartyResponse

logger = logging.getLogger(__name__)


def send_email(
    to_email: str,
    subject: str,
    body_html: str,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """
    Send an email via Gmail SMTP.

    Args:
        to_email: Recipient email address.
        subject: Email subject line.
        body_html: HTML body of the email.
        settings: Settings holding the Gmail credentials. Defaults to the
            environment settings.

    Returns:
        Dict with status, timestamp, and any error details.
    """
    settings = settings or get_settings()
    gmail_address = settings.gmail_address
    gmail_app_password = settings.gmail_app_password

    if not gmail_address or not gmail_app_password:
        logger.warning("Gmail credentials not configured. Set GMAIL_ADDRESS and GMAIL_APP_PASSWORD.")
        return {
            "status": "skipped",
            "error": "Email service not configured. Gmail credentials missing.",
            "timestamp": datetime.now().isoformat(),
        }

    msg = MIMEMultipart("alternative")
    msg["From"] = gmail_address
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.attach(MIMEText(body_html, "html"))

    try:
        with smtplib.SMTP("smtp.gmail.com", 587, timeout=30) as server:
            server.starttls()
            server.login(gmail_address, gmail_app_password)
            server.sendmail(gmail_address, [to_email], msg.as_string())

        logger.info(f"Email sent to {to_email}: {subject}")
        return {
            "status": "sent",
            "to": to_email,
            "subject": subject,
            "timestamp": datetime.now().isoformat(),
        }

    except smtplib.SMTPAuthenticationError:
        logger.error("SMTP authentication failed. Check GMAIL_APP_PASSWORD.")
        return {
            "status": "error",
            "error": "Authentication failed. Check Gmail app password.",
            "timestamp": datetime.now().isoformat(),
        }
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"SMTP error sending email: {e}")
        return {
            "status": "error",
            "error": f"SMTP error: {str(e)}",
            "timestamp": datetime.now().isoformat(),
        }


def build_invitation_email(
    party: DisputePartyResponse,
    dispute: DisputeResponse,
    app_base_url: str,
) -> Dict[str, str]:
    """Subject and HTML body inviting a party to join a dispute."""
    greeting = f"Hello {party.name}," if party.name else "Hello,"
    join_url = f"{app_base_url.rstrip('/')}/invitations/{party.invitation_code}"
    body_html = f"""
<p>{greeting}</p>
<p>You have been invited to take part in the dispute
<strong>{dispute.title}</strong> as <strong>{party.role.value}</strong>.</p>
<p>To join, open the link below or enter this invitation code after signing in:</p>
<p><a href="{join_url}">{join_url}</a></p>
<p><code>{party.invitation_code}</code></p>
<p>This invitation can only be used once.</p>
"""
    return {
        "subject": f"Invitation to resolve a dispute: {dispute.title}",
        "body_html": body_html,
    }


def send_invitation_email(
    party: DisputePartyResponse,
    dispute: DisputeResponse,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Email the invitation code to a newly invited party."""
    settings = settings or get_settings()
    message = build_invitation_email(party, dispute, settings.app_base_url)
    return send_email(party.email, message["subject"], message["body_html"], settings=settings)
