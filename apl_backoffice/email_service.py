"""
Email Service using Resend, with plain SMTP as fallback
Templates are written in MJML and compiled to HTML before sending
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

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY, SMTP_HOST, SMTP_PASS, SMTP_PORT, SMTP_USER
from .email_templates import basic_message_template, reminder_notification_template

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailError(Exception):
    """Raised when an email could not be delivered by any configured provider"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a result object/dict with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailError(f"Failed to compile MJML template: {str(e)}") from e


def send_via_smtp(to: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send email via the configured SMTP server"""
    # Gmail app passwords are often pasted with spaces
    password = (SMTP_PASS or "").replace(" ", "")
    if not SMTP_USER or not password:
        raise EmailError("SMTP_USER/SMTP_PASS not configured")

    try:
        msg = MIMEMultipart("mixed")
        msg["Subject"] = subject
        msg["From"] = from_address
        msg["To"] = ", ".join(to)
        msg.attach(MIMEText(html_content, "html"))

        if SMTP_PORT == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
            server.starttls(context=ssl.create_default_context())

        server.login(SMTP_USER, password)
        server.sendmail(from_address.split("<")[-1].rstrip(">"), to, msg.as_string())
        server.quit()

        logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
        return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}
    except Exception as e:
        logger.error(f"❌ SMTP send failed: {e}")
        raise EmailError(f"SMTP failed: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using Resend (when RESEND_API_KEY is set) or SMTP

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

    if not RESEND_API_KEY:
        logger.info(f"📧 Sending email via SMTP to: {recipients}")
        return send_via_smtp(recipients, subject, html_content, sender)

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {"from": sender, "to": recipients, "subject": subject, "html": html_content}
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailError(f"Failed to send email: {str(e)}") from e


async def send_basic_email(to: str, subject: str, message: str) -> dict:
    """Send a free-text message"""
    return await send_email(to=to, subject=subject, mjml_content=basic_message_template(subject, message))


async def send_reminder_email(
    to: str,
    titulo: str,
    fecha_recordatorio: str,
    prioridad: str,
    descripcion: Optional[str] = None,
    observaciones: Optional[str] = None,
) -> dict:
    """Send reminder due notification to laboratory staff"""
    mjml_content = reminder_notification_template(
        titulo=titulo,
        fecha_recordatorio=fecha_recordatorio,
        prioridad=prioridad,
        descripcion=descripcion,
        observaciones=observaciones,
    )
    return await send_email(to=to, subject=f"Recordatorio: {titulo}", mjml_content=mjml_content)
