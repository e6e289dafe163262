"""
Email Service using Resend

Sends account credential and school registration emails. Every sender is
called after the database writes it describes and reports failure by
returning False; callers log and carry on.
"""

import asyncio
import logging
import os
from html import escape

import resend

logger = logging.getLogger(__name__)

resend.api_key = os.getenv("RESEND_API_KEY")

EMAIL_FROM = os.getenv("EMAIL_FROM", "EduTrack <noreply@edutrack.dev>")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

_STYLE = """
    body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
    .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
    .header { color: #1a365d; margin-bottom: 24px; }
    .box { background-color: #f9fafb; border: 1px solid #e5e7eb; padding: 16px; border-radius: 8px; margin: 16px 0; }
    .warning { background-color: #fef3c7; border: 1px solid #f59e0b; padding: 12px 16px; border-radius: 8px; margin: 16px 0; font-size: 14px; }
    .button { display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""

_ROLE_LABELS = {
    "school_admin": "School Administrator",
    "principal": "Principal",
    "teacher": "Teacher",
    "parent": "Parent",
}


def _layout(title: str, body: str) -> str:
    """Wrap an already-escaped body in the shared email template."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><style>{_STYLE}</style></head>
    <body>
        <div class="container">
            <h1 class="header">{title}</h1>
            {body}
            <div class="footer">
                <p>EduTrack - School Management System</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent (or logged because no API key is configured)
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Resend's client is synchronous
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}", exc_info=True)
        return False


async def send_account_credentials(
    to_email: str,
    full_name: str,
    role: str,
    password: str,
    school_name: str | None = None,
) -> bool:
    """Welcome a newly created user with their login credentials."""
    safe_name = escape(full_name)
    safe_email = escape(to_email)
    safe_password = escape(password)
    role_label = _ROLE_LABELS.get(role, role.replace("_", " ").title())

    school_line = ""
    if school_name:
        school_line = f"<p>You have been added to <strong>{escape(school_name)}</strong> as a {role_label}.</p>"

    login_url = f"{FRONTEND_URL}/login"
    body = f"""
            <p>Dear {safe_name},</p>
            {school_line}
            <p>Your EduTrack account is ready. Here are your login credentials:</p>
            <div class="box">
                <p><strong>Login URL:</strong> <a href="{login_url}">{login_url}</a></p>
                <p><strong>Email:</strong> {safe_email}</p>
                <p><strong>Temporary Password:</strong> <code>{safe_password}</code></p>
            </div>
            <div class="warning">
                <strong>Important:</strong> You will be asked to change your password on first login.
            </div>
            <a href="{login_url}" class="button">Log In Now</a>
    """

    return await send_email(
        to_email=to_email,
        subject=f"Welcome to EduTrack - your {role_label} account",
        html_content=_layout("Welcome to EduTrack!", body),
    )


async def send_school_registration_received(
    to_email: str,
    admin_name: str,
    school_name: str,
) -> bool:
    """Tell the school admin the registration is awaiting verification."""
    body = f"""
            <p>Hello {escape(admin_name)},</p>
            <p><strong>{escape(school_name)}</strong> has been registered on EduTrack and is awaiting verification by our team.</p>
            <p>You will be notified as soon as the review is complete.</p>
    """

    return await send_email(
        to_email=to_email,
        subject=f"{school_name} registration received",
        html_content=_layout("Registration Received", body),
    )
