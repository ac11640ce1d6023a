# server/tasks/sanda_reminders.py
import logging
from datetime import datetime
from server.extension import db
from server.models import Family, ReminderLog
from server.service.reconciliation import has_paid
from server.service import whatsapp

logger = logging.getLogger(__name__)


def eligible_payers(family_id=None):
    query = Family.query.filter(
        Family.status == "active",
        Family.card_number.isnot(None),
        Family.whatsapp_no.isnot(None),
        Family.whatsapp_no != "",
    )
    if family_id is not None:
        query = query.filter(Family.id == family_id)
    return query.order_by(Family.card_number).all()


def _log_attempt(family, month, year, status, message="", error_message=None):
    db.session.add(ReminderLog(
        family_id=family.id,
        month=month,
        year=year,
        status=status,
        message=message,
        error_message=error_message,
        sent_at=datetime.utcnow(),
    ))
    db.session.commit()


def send_sanda_reminders(month=None, year=None, family_id=None):
    """
    Remind every active, reachable payer who has not paid for the month.

    Returns counts of sent/failed/skipped plus the per-payer error strings.
    Missing Twilio credentials abort the run before anything is sent.
    """
    now = datetime.utcnow()
    month = month or now.month
    year = year or now.year
    settings = whatsapp.twilio_settings()

    logger.info(f"Processing reminders for {month}/{year}")
    results = {"month": month, "year": year, "sent": 0, "failed": 0, "skipped": 0, "errors": []}

    payers = eligible_payers(family_id)
    if not payers:
        logger.info("No active payers found")
        return results

    for family in payers:
        if has_paid(family.id, month, year):
            logger.info(f"Skipping {family.family_name} - already paid for {month}/{year}")
            results["skipped"] += 1
            continue

        message = whatsapp.compose_reminder(family.family_name, month, family.sanda_amount, family.amount_type)
        try:
            whatsapp.send_whatsapp(family.whatsapp_no, message, settings=settings)
        except Exception as e:
            # Twilio API and transport errors both count as a failed attempt
            error_message = getattr(e, "msg", None) or str(e) or "Unknown error"
            logger.error(f"Failed to send reminder to {family.family_name}: {error_message}")
            _log_attempt(family, month, year, "failed", message, error_message)
            results["failed"] += 1
            results["errors"].append(f"{family.family_name}: {error_message}")
            continue

        _log_attempt(family, month, year, "success", message)
        logger.info(f"Successfully sent reminder to {family.family_name}")
        results["sent"] += 1

    logger.info(f"Reminder sending completed: {results}")
    return results


def process_sanda_reminders(app):
    """Scheduled entry point; runs the monthly reminder job inside an app context."""
    with app.app_context():
        try:
            send_sanda_reminders()
        except Exception as e:
            logger.error(f"Error processing sanda reminders: {e}", exc_info=True)
            db.session.rollback()
