"""
Email Service using Resend with an SMTP fallback
Provides email functionality using MJML templates for responsive design
"""

import logging
import smtplib
import ssl
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    OTP_EXPIRY_MINUTES,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USERNAME,
)
from .email_templates import (
    custom_reminder_template,
    event_assignment_template,
    event_reminder_template,
    format_day,
    format_hour,
    new_member_template,
    password_reset_otp_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        # mjml-python returns an object with .html and .errors
        if hasattr(result, "html"):
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return result.html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


def send_via_smtp(to: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send email through the configured SMTP server"""
    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = from_address
        msg["To"] = ", ".join(to)
        msg.attach(MIMEText(html_content, "html"))

        context = ssl.create_default_context()
        if SMTP_PORT == 465:
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
            server.starttls(context=context)

        try:
            if SMTP_USERNAME:
                server.login(SMTP_USERNAME, SMTP_PASSWORD or "")
            server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
        finally:
            server.quit()

        logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
        return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}
    except Exception as e:
        logger.error(f"❌ SMTP send failed: {e}")
        raise Exception(f"SMTP failed: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using Resend, falling back to SMTP

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if RESEND_API_KEY:
        try:
            logger.info(f"📧 Sending email via Resend to: {recipients}")
            response = resend.Emails.send(
                {
                    "from": sender,
                    "to": recipients,
                    "subject": subject,
                    "html": html_content,
                }
            )
            logger.info(f"✅ Email sent successfully via Resend: {response}")
            return response
        except Exception as e:
            if not SMTP_HOST:
                logger.error(f"❌ Email send error to {recipients}: {e}")
                raise Exception(f"Failed to send email: {str(e)}") from e
            logger.warning(f"⚠️ Resend failed, falling back to SMTP: {e}")

    if SMTP_HOST:
        logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
        return send_via_smtp(recipients, subject, html_content, sender)

    logger.error("❌ No email service configured - RESEND_API_KEY and SMTP_HOST missing")
    raise Exception("Email service not configured")


# ============================================
# Pre-built Emails
# ============================================


async def send_new_member_email(to: str, name: str, password: str, company_name: str) -> dict:
    """Send login credentials to a newly added member"""
    return await send_email(
        to=to,
        subject=f"Welcome to {company_name}! Your account has been created",
        mjml_content=new_member_template(name, to, password, company_name),
    )


async def send_password_reset_otp(to: str, otp: str, company_name: str) -> dict:
    return await send_email(
        to=to,
        subject=f"Password Reset OTP - {company_name}",
        mjml_content=password_reset_otp_template(otp, company_name, OTP_EXPIRY_MINUTES),
    )


async def send_event_assignment_email(
    to: str,
    member_name: str,
    event,
    project_name: str,
    company_name: str,
    instructions: Optional[str] = None,
) -> dict:
    """Tell a member they were assigned to an event"""
    return await send_email(
        to=to,
        subject=f"New assignment: {event.name} ({project_name})",
        mjml_content=event_assignment_template(
            member_name=member_name,
            event_name=event.name,
            project_name=project_name,
            event_date=format_day(event.date),
            start_time=format_hour(event.start_hour),
            end_time=format_hour(event.end_hour),
            location=event.location,
            company_name=company_name,
            instructions=instructions,
        ),
    )


async def send_event_reminder_email(
    to: str,
    member_name: str,
    event,
    project_name: str,
    company_name: str,
    days_until: int,
) -> dict:
    day_label = "day" if days_until == 1 else "days"
    return await send_email(
        to=to,
        subject=f"Reminder: {event.name} starts in {days_until} {day_label}",
        mjml_content=event_reminder_template(
            member_name=member_name,
            event_name=event.name,
            project_name=project_name,
            event_date=format_day(event.date),
            start_time=format_hour(event.start_hour),
            end_time=format_hour(event.end_hour),
            location=event.location,
            company_name=company_name,
            days_until=days_until,
        ),
    )


async def send_custom_reminder_email(
    to: str,
    member_name: str,
    event,
    project_name: str,
    company_name: str,
    message: Optional[str],
) -> dict:
    return await send_email(
        to=to,
        subject=f"Reminder: {event.name}",
        mjml_content=custom_reminder_template(
            member_name=member_name,
            event_name=event.name,
            project_name=project_name,
            event_date=format_day(event.date),
            start_time=format_hour(event.start_hour),
            end_time=format_hour(event.end_hour),
            location=event.location,
            company_name=company_name,
            message=message,
        ),
    )
