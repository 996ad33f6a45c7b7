"""Expiry alert service — daily digest of permits and papers about to expire.

Collects:
  - open permits due within alerts.alert_days_before days
  - documents whose expiry date falls in the same window
  - passport / licence / work permit / residence id expiries on people

and emails one digest to MAIL_ALERTS_TO. Nothing is sent when
alerts.permit_expiry_alerts is off or when there is nothing to report.

Called from the `flask send-expiry-alerts` CLI command on a daily cron.
"""

import logging
import smtplib
from datetime import date

import click
from flask import current_app

from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.services import document_service, people_service, permit_service
from hospital_admin.services.email_service import send_email_sync
from hospital_admin.services.settings_service import get_settings

logger = logging.getLogger(__name__)


def collect_expiring(days_ahead, today=None):
    """Return {"permits": [...], "documents": [...], "papers": [...]}."""
    today = today or date.today()
    return {
        "permits": permit_service.expiring_permits(days_ahead, today),
        "documents": document_service.expiring_documents(days_ahead, today),
        "papers": people_service.expiring_papers(days_ahead, today),
    }


def process_expiry_alerts(dry_run=False, today=None):
    """Build and send the expiry digest.

    Args:
        dry_run: If True, report what would be sent but don't send.
        today: Reference date (defaults to date.today()).

    Returns:
        int: Number of expiring items in the digest (0 when skipped).
    """
    today = today or date.today()
    settings = get_settings()

    if dry_run:
        click.echo("[DRY RUN] No emails will actually be sent.\n")

    if not settings["alerts.permit_expiry_alerts"]:
        click.echo("Permit expiry alerts are turned off in settings. Nothing to do.")
        return 0

    recipient = current_app.config.get("MAIL_ALERTS_TO")
    if not recipient:
        click.echo("MAIL_ALERTS_TO is not configured. Nothing to do.")
        return 0

    days_ahead = settings["alerts.alert_days_before"]
    items = collect_expiring(days_ahead, today)
    total = sum(len(v) for v in items.values())

    click.echo(f"Window: {days_ahead} day(s) from {today.isoformat()}")
    click.echo(f"  Permits:   {len(items['permits'])}")
    click.echo(f"  Documents: {len(items['documents'])}")
    click.echo(f"  Papers:    {len(items['papers'])}")

    if total == 0:
        click.echo("Nothing expiring. No email sent.")
        return 0

    subject = f"{total} item(s) expiring within {days_ahead} days"

    if dry_run:
        click.echo(f"WOULD SEND → {recipient}")
        click.echo(f"   Subject: {subject}")
        return total

    click.echo(f"SENDING → {recipient}")
    try:
        send_email_sync(
            to=recipient,
            subject=subject,
            template="emails/expiry_alert.html",
            context={
                "organization_name": settings["organization.name"],
                "days_ahead": days_ahead,
                "today": today,
                **items,
            },
        )
    except (OSError, smtplib.SMTPException, RuntimeError) as e:
        logger.error(f"Expiry alert email failed: {e}")
        click.echo(f"   ✗ FAILED: {e}")
        return 0

    audit.record(
        "alerts.expiry_sent", None, entity_type="alerts",
        recipient=recipient, items=total, days_ahead=days_ahead,
    )
    db.session.commit()
    click.echo("   ✓ Sent and logged.")
    return total
