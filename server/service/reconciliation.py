# server/service/reconciliation.py
import logging
from decimal import Decimal
from sqlalchemy import func
from server.extension import db
from server.models import Donation, PAYMENT_METHODS
from server.utils.errors import ValidationError, ConflictError
from server.utils.helper import to_decimal, to_date
from server.utils.change_logger import log_change

logger = logging.getLogger(__name__)

ALL_MONTHS = tuple(range(1, 13))

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_names(months):
    return [MONTH_NAMES[m - 1] for m in sorted(set(months))]


def normalize_months(months):
    """Validate a month selection and return it deduplicated and sorted."""
    if not months:
        raise ValidationError("Select at least one month", {"months_paid": ["At least one month is required."]})
    cleaned = set()
    for m in months:
        if isinstance(m, bool) or not isinstance(m, int) or m not in ALL_MONTHS:
            raise ValidationError(f"Invalid month: {m}", {"months_paid": ["Months must be integers between 1 and 12."]})
        cleaned.add(m)
    return sorted(cleaned)


def validate_year(year):
    if isinstance(year, bool) or not isinstance(year, int) or year <= 0:
        raise ValidationError("Year must be a positive integer", {"year": ["Must be a positive integer."]})
    return year


def paid_months(family_id, year, method=None):
    """Union of months_paid over every donation for (family_id, year), sorted."""
    query = db.session.query(Donation.months_paid).filter(
        Donation.family_id == family_id,
        Donation.year == year,
    )
    if method:
        query = query.filter(Donation.method == method)

    months = set()
    for (row_months,) in query.all():
        months.update(row_months or [])
    return sorted(months)


def unpaid_months(paid):
    paid = set(paid)
    return [m for m in ALL_MONTHS if m not in paid]


def has_paid(family_id, month, year):
    return month in paid_months(family_id, year)


def compute_amount(family, months):
    """
    Amount due for a selection of months.

    monthly payers pay sanda_amount per selected month, yearly payers pay
    sanda_amount once regardless of the selection. An unset amount gives 0.
    """
    if family.sanda_amount is None:
        return Decimal("0")
    amount = Decimal(family.sanda_amount)
    if family.is_yearly:
        return amount
    return amount * len(set(months))


def expected_yearly_amount(family):
    if family.sanda_amount is None:
        return Decimal("0")
    if family.is_yearly:
        return Decimal(family.sanda_amount)
    return Decimal(family.sanda_amount) * 12


def collected_amount(family_id, year, method=None):
    query = db.session.query(func.coalesce(func.sum(Donation.amount), 0)).filter(
        Donation.family_id == family_id,
        Donation.year == year,
    )
    if method:
        query = query.filter(Donation.method == method)
    total = query.scalar()
    return Decimal(total or 0)


def payment_status(family, year, method=None):
    paid = paid_months(family.id, year, method=method)
    return {
        "family_id": family.id,
        "card_number": family.card_number,
        "year": year,
        "amount_type": family.amount_type,
        "paid_months": paid,
        "unpaid_months": unpaid_months(paid),
        "paid_month_names": month_names(paid),
        "paid_count": len(paid),
        "collected": float(collected_amount(family.id, year, method=method)),
        "expected": float(expected_yearly_amount(family)),
    }


def _validate_method(method):
    if method not in PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid payment method: {method}",
            {"method": [f"Must be one of: {', '.join(PAYMENT_METHODS)}."]},
        )
    return method


def record_payment(family, year, months, method="cash", date=None, notes=None, reject_duplicates=False):
    """Validate and persist one payment transaction for a payer."""
    if family is None:
        raise ValidationError("Payer is required", {"family_id": ["Unknown payer."]})
    year = validate_year(year)
    months = normalize_months(months)
    _validate_method(method)
    payment_date = to_date(date)

    amount = compute_amount(family, months)
    if amount <= 0:
        raise ValidationError(
            f"Sanda amount is not configured for {family.family_name}",
            {"sanda_amount": ["Payer has no Sanda amount configured."]},
        )

    if reject_duplicates:
        already = sorted(set(paid_months(family.id, year)) & set(months))
        if already:
            raise ConflictError(
                f"Months already paid for {year}: {', '.join(month_names(already))}"
            )

    donation = Donation(
        family_id=family.id,
        amount=amount,
        date=payment_date,
        method=method,
        year=year,
        months_paid=months,
        notes=notes,
    )
    db.session.add(donation)
    db.session.flush()
    log_change("Donation", donation.id, "create", {
        "family_id": family.id,
        "year": year,
        "months_paid": months,
        "amount": float(amount),
        "method": method,
    })
    db.session.commit()

    logger.info(f"Recorded payment {donation.id} for family {family.id}: {year} months={months} amount={amount}")
    return donation


def update_payment(donation, patch):
    """Edit a recorded payment; only the record itself changes."""
    changes = {}
    if "year" in patch:
        changes["year"] = validate_year(patch["year"])
    if "months_paid" in patch:
        changes["months_paid"] = normalize_months(patch["months_paid"])
    if "method" in patch:
        changes["method"] = _validate_method(patch["method"])
    if "date" in patch:
        changes["date"] = to_date(patch["date"])
    if "notes" in patch:
        changes["notes"] = patch["notes"]

    if "amount" in patch:
        amount = to_decimal(patch["amount"])
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be a positive number", {"amount": ["Invalid amount."]})
        changes["amount"] = amount
    elif "months_paid" in changes and donation.family is not None:
        changes["amount"] = compute_amount(donation.family, changes["months_paid"])
        if changes["amount"] <= 0:
            raise ValidationError(
                f"Sanda amount is not configured for {donation.family.family_name}",
                {"sanda_amount": ["Payer has no Sanda amount configured."]},
            )

    for key, value in changes.items():
        setattr(donation, key, value)

    log_change("Donation", donation.id, "update", {
        "year": donation.year,
        "months_paid": donation.months_paid,
        "amount": float(donation.amount),
        "method": donation.method,
    })
    db.session.commit()
    return donation


def delete_payment(donation):
    log_change("Donation", donation.id, "delete", {
        "family_id": donation.family_id,
        "year": donation.year,
        "months_paid": donation.months_paid,
        "amount": float(donation.amount),
    })
    db.session.delete(donation)
    db.session.commit()
