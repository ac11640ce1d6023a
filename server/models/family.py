from datetime import datetime
from server.extension import db


AMOUNT_TYPES = ("monthly", "yearly")
FAMILY_STATUSES = ("active", "inactive")


class Family(db.Model):
    """A registered family. Families holding a Sanda card are the payers."""

    __tablename__ = "families"

    id = db.Column(db.Integer, primary_key=True)
    family_name = db.Column(db.String(255), nullable=False)
    card_number = db.Column(db.String(50), unique=True, nullable=True)
    root_no = db.Column(db.String(50), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    whatsapp_no = db.Column(db.String(50), nullable=True)
    nic_or_id = db.Column(db.String(50), nullable=True)

    # Sanda profile
    sanda_amount = db.Column(db.Numeric(12, 2), nullable=True)
    amount_type = db.Column(db.String(20), nullable=False, default="monthly")
    status = db.Column(db.String(20), nullable=False, default="active")

    zakat_status = db.Column(db.String(50), nullable=True)
    total_members = db.Column(db.Integer, nullable=False, default=0)
    family_head_id = db.Column(
        db.Integer,
        db.ForeignKey("family_members.id", ondelete="SET NULL", use_alter=True, name="fk_families_head"),
        nullable=True,
    )
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    members = db.relationship(
        "FamilyMember",
        back_populates="family",
        foreign_keys="FamilyMember.family_id",
        cascade="all, delete-orphan",
    )
    head = db.relationship("FamilyMember", foreign_keys=[family_head_id], post_update=True)
    donations = db.relationship("Donation", back_populates="family", cascade="all, delete-orphan")
    # reminder logs are kept when a family is deleted, with family_id set to NULL
    reminder_logs = db.relationship("ReminderLog", back_populates="family")
    zakat_transactions = db.relationship("ZakatTransaction", back_populates="family")

    @property
    def is_yearly(self):
        return self.amount_type == "yearly"


class FamilyMember(db.Model):
    __tablename__ = "family_members"

    id = db.Column(db.Integer, primary_key=True)
    family_id = db.Column(db.Integer, db.ForeignKey("families.id", ondelete="CASCADE"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(20), nullable=True)
    relationship = db.Column(db.String(50), nullable=True)  # head, spouse, son, daughter...
    occupation = db.Column(db.String(120), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    family = db.relationship("Family", back_populates="members", foreign_keys=[family_id])
