from datetime import datetime, date
from server.extension import db


PAYMENT_METHODS = ("cash", "card", "online", "bank_transfer", "cheque", "sanda")


class Donation(db.Model):
    __tablename__ = "donations"

    id = db.Column(db.Integer, primary_key=True)
    family_id = db.Column(db.Integer, db.ForeignKey("families.id", ondelete="CASCADE"), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    date = db.Column(db.Date, nullable=False, default=date.today)
    method = db.Column(db.String(50), nullable=False, default="cash")
    year = db.Column(db.Integer, nullable=False, index=True)
    months_paid = db.Column(db.JSON, nullable=False, default=list)  # ints 1..12, sorted
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    family = db.relationship("Family", back_populates="donations")
