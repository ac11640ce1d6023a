# server/service/zakat_ledger.py
from decimal import Decimal
from server.extension import db
from server.models import ZakatTransaction, Family, ZAKAT_TYPES
from server.utils.errors import ValidationError
from server.utils.helper import to_decimal, to_date
from server.utils.change_logger import log_change


def _field(txn, name):
    if isinstance(txn, dict):
        return txn.get(name)
    return getattr(txn, name, None)


def ledger_totals(transactions):
    """Collected, distributed and balance over a list of zakat transactions."""
    collected = Decimal("0")
    distributed = Decimal("0")
    for txn in transactions:
        amount = Decimal(str(_field(txn, "amount") or 0))
        kind = _field(txn, "type")
        if kind == "collection":
            collected += amount
        elif kind == "distribution":
            distributed += amount
    return {
        "collected": collected,
        "distributed": distributed,
        "balance": collected - distributed,
    }


def filter_transactions(transactions, search=None, type_=None):
    """Filter for the displayed list only; summary totals use the full set."""
    term = (search or "").strip().lower()
    result = []
    for txn in transactions:
        if type_ and type_ != "all" and _field(txn, "type") != type_:
            continue
        if term:
            names = [(_field(txn, "donor_name") or ""), (_field(txn, "recipient_name") or "")]
            if not any(term in name.lower() for name in names):
                continue
        result.append(txn)
    return result


def _clean_payload(data, existing=None):
    kind = data.get("type", existing.type if existing else None)
    if kind not in ZAKAT_TYPES:
        raise ValidationError("Invalid zakat type", {"type": [f"Must be one of: {', '.join(ZAKAT_TYPES)}."]})

    if "amount" in data or existing is None:
        amount = to_decimal(data.get("amount"))
        if amount is None:
            raise ValidationError("Amount is required", {"amount": ["Missing data for required field."]})
        if amount < 0:
            raise ValidationError("Amount cannot be negative", {"amount": ["Must be zero or greater."]})
    else:
        amount = existing.amount

    family = None
    family_id = data.get("family_id", existing.family_id if existing else None) or None
    if family_id is not None:
        family = db.session.get(Family, family_id)
        if family is None:
            raise ValidationError("Unknown family", {"family_id": ["Family not found."]})

    donor_name = data.get("donor_name", existing.donor_name if existing else None)
    recipient_name = data.get("recipient_name", existing.recipient_name if existing else None)
    if kind == "collection":
        recipient_name = None
        if not donor_name and family:
            donor_name = family.family_name
    else:
        donor_name = None
        if not recipient_name and family:
            recipient_name = family.family_name

    cleaned = {
        "type": kind,
        "amount": amount,
        "family_id": family.id if family else None,
        "donor_name": donor_name or None,
        "recipient_name": recipient_name or None,
    }
    if "date" in data or existing is None:
        cleaned["date"] = to_date(data.get("date"))
    for key in ("purpose", "method", "notes"):
        if key in data:
            cleaned[key] = data[key] or None
    return cleaned


def create_transaction(data):
    txn = ZakatTransaction(**_clean_payload(data))
    db.session.add(txn)
    db.session.flush()
    log_change("ZakatTransaction", txn.id, "create", {"type": txn.type, "amount": float(txn.amount)})
    db.session.commit()
    return txn


def update_transaction(txn, data):
    for key, value in _clean_payload(data, existing=txn).items():
        setattr(txn, key, value)
    log_change("ZakatTransaction", txn.id, "update", {"type": txn.type, "amount": float(txn.amount)})
    db.session.commit()
    return txn


def delete_transaction(txn):
    log_change("ZakatTransaction", txn.id, "delete", {"type": txn.type, "amount": float(txn.amount)})
    db.session.delete(txn)
    db.session.commit()
