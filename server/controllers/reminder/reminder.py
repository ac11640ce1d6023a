import logging
from flask_restful import Resource, Api, reqparse
from flask import request
from sqlalchemy.orm import joinedload
from server.models import ReminderLog
from server.schemas.reminder_log_schema import ReminderLogSchema
from server.tasks.sanda_reminders import send_sanda_reminders
from server.utils.change_logger import log_change
from server.utils.decorators import role_required
from server.utils.roles import ROLE_ADMIN
from server.extension import db
from . import reminder_bp

logger = logging.getLogger(__name__)

api = Api(reminder_bp)

reminder_logs_schema = ReminderLogSchema(many=True)


def _month_or_none(value):
    if value in (None, ""):
        return None
    month = int(value)
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    return month


class RunSandaReminders(Resource):
    """Manual trigger: all eligible payers, or a single one with family_id."""

    @role_required(ROLE_ADMIN)
    def post(self):
        data = request.get_json(silent=True) or {}
        try:
            month = _month_or_none(data.get("month"))
            year = int(data["year"]) if data.get("year") else None
        except (TypeError, ValueError) as e:
            return {"message": f"Invalid month/year: {e}"}, 400

        try:
            results = send_sanda_reminders(month=month, year=year, family_id=data.get("family_id"))
        except RuntimeError as e:
            logger.error(f"Reminder run aborted: {e}")
            return {"error": str(e)}, 500

        log_change("ReminderRun", None, "reminder", {
            key: results[key] for key in ("month", "year", "sent", "failed", "skipped")
        })
        db.session.commit()
        return results, 200


class ReminderLogList(Resource):

    @role_required(ROLE_ADMIN)
    def get(self):
        parser = reqparse.RequestParser()
        parser.add_argument("month", type=int, required=False, location="args")
        parser.add_argument("year", type=int, required=False, location="args")
        parser.add_argument("status", type=str, required=False, choices=("success", "failed", "pending"), location="args")
        args = parser.parse_args()

        query = ReminderLog.query.options(joinedload(ReminderLog.family))
        if args.get("month"):
            query = query.filter(ReminderLog.month == args["month"])
        if args.get("year"):
            query = query.filter(ReminderLog.year == args["year"])
        if args.get("status"):
            query = query.filter(ReminderLog.status == args["status"])

        logs = query.order_by(ReminderLog.sent_at.desc(), ReminderLog.id.desc()).all()
        return {"logs": reminder_logs_schema.dump(logs)}, 200


api.add_resource(RunSandaReminders, "/reminders/run")
api.add_resource(ReminderLogList, "/reminder-logs")
