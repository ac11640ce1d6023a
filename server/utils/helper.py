from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from flask import request
from server.utils.errors import ValidationError

def parse_json(required_fields=None):
    data = request.get_json(silent=True) or {}

    if required_fields:
        missing = [f for f in required_fields if f not in data or data[f] in (None, "", [])]
        if missing:
            return None, {"message": f"Missing required fields: {', '.join(missing)}"}, 400

    return data, None, None


def to_decimal(value, field="amount"):
    """Parse a money value; blank means unset."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be numeric", {field: ["Not a valid number."]})
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be numeric", {field: ["Not a valid number."]})
    if not amount.is_finite():
        raise ValidationError(f"{field} must be numeric", {field: ["Not a valid number."]})
    return amount


def to_date(value, field="date"):
    if value is None or value == "":
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError("Invalid date format. Use ISO format.", {field: ["Not a valid date."]})


def money(value):
    """Float view of a Decimal amount for JSON responses."""
    return float(value or 0)
