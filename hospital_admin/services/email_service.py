"""
Email service for the hospital admin dashboard.

Sends HTML email over SMTP (STARTTLS). Used by the expiry alert digest
and available to anything else that needs to notify staff.

Usage:
    from hospital_admin.services.email_service import send_email

    send_email(
        to="hr@hospital.example",
        subject="Permits expiring",
        template="emails/expiry_alert.html",
        context={"permits": [...]},
    )
"""

import logging
import smtplib
import threading
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app, render_template

from hospital_admin.services.settings_service import get_secret

logger = logging.getLogger(__name__)

# Admins can store the SMTP password via PUT /api/settings/secrets/<key>
SMTP_PASSWORD_SECRET = "mail.smtp_password"


def _deliver(app, msg):
    """Open an SMTP connection and send msg. Raises on failure."""
    host = app.config.get("MAIL_SMTP_HOST", "smtp.gmail.com")
    port = app.config.get("MAIL_SMTP_PORT", 587)
    username = app.config.get("MAIL_USERNAME")
    password = app.config.get("MAIL_PASSWORD") or get_secret(SMTP_PASSWORD_SECRET)

    if not username or not password:
        raise RuntimeError("MAIL_USERNAME or MAIL_PASSWORD not configured.")

    with smtplib.SMTP(host, port, timeout=30) as server:
        server.ehlo()
        server.starttls()
        server.ehlo()
        server.login(username, password)
        server.send_message(msg)
    logger.info(f"Email sent to {msg['To']} — {msg['Subject']}")


def _send_background(app, msg):
    """Thread target: failures are logged, the request has already returned."""
    with app.app_context():
        try:
            _deliver(app, msg)
        except (OSError, smtplib.SMTPException, RuntimeError) as e:
            logger.error(f"Failed to send email to {msg['To']}: {e}")


def build_message(to, subject, template, context=None, reply_to=None):
    """Render template and wrap it in a MIME message."""
    app = current_app._get_current_object()
    context = context or {}

    from_name = app.config.get("MAIL_FROM_NAME", "Soddo Hospital Admin")
    from_email = app.config.get("MAIL_FROM_ADDRESS") or app.config.get("MAIL_USERNAME", "")

    html_body = render_template(template, **context)

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{from_name} <{from_email}>"
    msg["To"] = to if isinstance(to, str) else ", ".join(to)

    if reply_to:
        msg["Reply-To"] = reply_to

    msg.attach(MIMEText(html_body, "html"))
    return msg


def send_email(to, subject, template, context=None, reply_to=None):
    """
    Send a templated HTML email without blocking the request.

    Args:
        to:        Recipient email address (str or list).
        subject:   Email subject line.
        template:  Path to Jinja2 HTML template (relative to templates/).
        context:   Dict of variables to pass to the template.
        reply_to:  Optional reply-to address.
    """
    app = current_app._get_current_object()
    msg = build_message(to, subject, template, context, reply_to)

    thread = threading.Thread(target=_send_background, args=(app, msg))
    thread.daemon = True
    thread.start()


def send_email_sync(to, subject, template, context=None, reply_to=None):
    """
    Same as send_email but blocks until sent and raises on failure.
    The CLI uses this so it can report what was delivered.
    """
    app = current_app._get_current_object()
    msg = build_message(to, subject, template, context, reply_to)
    _deliver(app, msg)
