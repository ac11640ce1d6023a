from datetime import datetime, date
from server.extension import db


ZAKAT_TYPES = ("collection", "distribution")


class ZakatTransaction(db.Model):
    __tablename__ = "zakat_transactions"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(20), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    date = db.Column(db.Date, nullable=False, default=date.today)
    donor_name = db.Column(db.String(255), nullable=True)
    recipient_name = db.Column(db.String(255), nullable=True)
    family_id = db.Column(db.Integer, db.ForeignKey("families.id", ondelete="SET NULL"), nullable=True)
    purpose = db.Column(db.String(255), nullable=True)
    method = db.Column(db.String(50), nullable=True, default="cash")
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    family = db.relationship("Family", back_populates="zakat_transactions")
