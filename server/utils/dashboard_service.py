import logging
from datetime import datetime
from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload
from server.models import db, Family, FamilyMember, Donation, ZakatTransaction, ChangeLog
from server.service.zakat_ledger import ledger_totals

logger = logging.getLogger(__name__)


class DashboardService:
    @staticmethod
    def get_sanda_stats(month, year):
        """Current-month Sanda figures; a multi-month payment contributes its per-month share."""
        total_payers = Family.query.filter(Family.card_number.isnot(None)).count()
        donations = Donation.query.filter(Donation.year == year).all()

        monthly_total = Decimal("0")
        paid_family_ids = set()
        for d in donations:
            months = d.months_paid or []
            if month in months:
                monthly_total += Decimal(d.amount) / len(months)
                paid_family_ids.add(d.family_id)

        return {
            "month": month,
            "year": year,
            "monthly_total": round(float(monthly_total), 2),
            "members_paid": len(paid_family_ids),
            "members_pending": max(total_payers - len(paid_family_ids), 0),
            "total_payers": total_payers,
        }

    @staticmethod
    def get_registry_stats():
        return {
            "total_families": db.session.query(func.count(Family.id)).scalar() or 0,
            "total_individuals": db.session.query(func.count(FamilyMember.id)).scalar() or 0,
        }

    @staticmethod
    def get_zakat_stats():
        totals = ledger_totals(ZakatTransaction.query.all())
        return {key: float(value) for key, value in totals.items()}

    @staticmethod
    def get_recent_donations(limit=5):
        donations = (
            Donation.query.options(joinedload(Donation.family))
            .order_by(Donation.created_at.desc(), Donation.id.desc())
            .limit(limit)
            .all()
        )
        return [{
            "id": d.id,
            "family_name": d.family.family_name if d.family else None,
            "card_number": d.family.card_number if d.family else None,
            "amount": float(d.amount),
            "date": d.date.isoformat() if d.date else None,
            "method": d.method,
            "months_paid": d.months_paid or [],
        } for d in donations]

    @staticmethod
    def get_recent_logs(limit=10):
        """Recent admin activity; a failure here must not take the dashboard down."""
        try:
            logs = ChangeLog.query.order_by(ChangeLog.timestamp.desc()).limit(limit).all()
            return [log.to_dict(only=("entity_type", "entity_id", "action", "timestamp", "details")) for log in logs]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load recent activity: {e}", exc_info=True)
            db.session.rollback()
            return []

    @classmethod
    def build(cls, now=None):
        now = now or datetime.utcnow()
        return {
            "sanda": cls.get_sanda_stats(now.month, now.year),
            "registry": cls.get_registry_stats(),
            "zakat": cls.get_zakat_stats(),
            "recent_donations": cls.get_recent_donations(),
            "recent_activity": cls.get_recent_logs(),
        }
