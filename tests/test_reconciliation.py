from datetime import date
from decimal import Decimal
import pytest
from server.models import Donation, ChangeLog
from server.service.reconciliation import (
    paid_months, unpaid_months, has_paid, compute_amount, record_payment,
    update_payment, delete_payment, payment_status, month_names, ALL_MONTHS,
)
from server.utils.errors import ValidationError, ConflictError


def test_paid_months_is_sorted_union_without_duplicates(db, make_family):
    family = make_family()
    record_payment(family, 2024, [7, 3], method="cash")
    record_payment(family, 2024, [3, 11], method="sanda")
    record_payment(family, 2023, [1], method="cash")

    assert paid_months(family.id, 2024) == [3, 7, 11]
    assert paid_months(family.id, 2023) == [1]


def test_paid_months_can_be_restricted_to_one_method(db, make_family):
    family = make_family()
    record_payment(family, 2024, [1, 2], method="cash")
    record_payment(family, 2024, [5], method="sanda")

    assert paid_months(family.id, 2024, method="sanda") == [5]


def test_payment_status_collected_follows_method_filter(db, make_family):
    family = make_family(sanda_amount=Decimal("1000"))
    record_payment(family, 2024, [1, 2], method="sanda")
    record_payment(family, 2024, [3, 4, 5], method="cash")

    status = payment_status(family, 2024, method="sanda")
    assert status["paid_months"] == [1, 2]
    assert status["collected"] == 2000.0

    assert payment_status(family, 2024)["collected"] == 5000.0


def test_paid_months_empty_when_nothing_recorded(db, make_family):
    family = make_family()
    assert paid_months(family.id, 2024) == []
    assert unpaid_months([]) == list(ALL_MONTHS)


def test_paid_and_unpaid_partition_the_year(db, make_family):
    family = make_family()
    record_payment(family, 2024, [2, 4, 6, 12])

    paid = paid_months(family.id, 2024)
    unpaid = unpaid_months(paid)

    assert set(paid) | set(unpaid) == set(range(1, 13))
    assert not set(paid) & set(unpaid)
    assert unpaid == sorted(unpaid)


def test_paid_months_is_stable_without_new_writes(db, make_family):
    family = make_family()
    record_payment(family, 2024, [5, 6])
    assert paid_months(family.id, 2024) == paid_months(family.id, 2024)


def test_future_months_count_as_unpaid():
    assert unpaid_months([1, 2]) == [3, 4, 5, 6, 7, 8, 9, 10, 11, 12]


def test_has_paid(db, make_family):
    family = make_family()
    record_payment(family, 2024, [4])
    assert has_paid(family.id, 4, 2024)
    assert not has_paid(family.id, 5, 2024)
    assert not has_paid(family.id, 4, 2025)


def test_compute_amount_monthly_multiplies_by_month_count(make_family):
    family = make_family(sanda_amount=Decimal("1000"), amount_type="monthly")
    assert compute_amount(family, [3, 7, 11]) == Decimal("3000")


def test_compute_amount_yearly_ignores_month_count(make_family):
    family = make_family(sanda_amount=Decimal("12000"), amount_type="yearly")
    assert compute_amount(family, [1]) == Decimal("12000")
    assert compute_amount(family, list(range(1, 13))) == Decimal("12000")


def test_compute_amount_without_configured_amount_is_zero(make_family):
    family = make_family(sanda_amount=None)
    assert compute_amount(family, [1, 2]) == Decimal("0")


def test_record_payment_persists_transaction(db, make_family):
    family = make_family(sanda_amount=Decimal("1000"))
    donation = record_payment(family, 2024, [11, 3, 7], method="cash", date="2024-03-15")

    stored = db.session.get(Donation, donation.id)
    assert stored.amount == Decimal("3000")
    assert stored.months_paid == [3, 7, 11]
    assert stored.date == date(2024, 3, 15)
    assert ChangeLog.query.filter_by(entity_type="Donation", entity_id=donation.id, action="create").count() == 1


def test_empty_month_selection_is_rejected_before_any_write(db, make_family):
    family = make_family()
    with pytest.raises(ValidationError):
        record_payment(family, 2024, [])
    assert Donation.query.count() == 0


@pytest.mark.parametrize("months", [[0], [13], ["3"], [True]])
def test_out_of_range_months_are_rejected(db, make_family, months):
    family = make_family()
    with pytest.raises(ValidationError):
        record_payment(family, 2024, months)
    assert Donation.query.count() == 0


@pytest.mark.parametrize("year", [0, -1, "2024", None])
def test_year_must_be_positive_integer(db, make_family, year):
    family = make_family()
    with pytest.raises(ValidationError):
        record_payment(family, year, [1])


def test_unknown_method_is_rejected(db, make_family):
    family = make_family()
    with pytest.raises(ValidationError):
        record_payment(family, 2024, [1], method="barter")


def test_payer_without_amount_cannot_record_free_payment(db, make_family):
    family = make_family(sanda_amount=None)
    with pytest.raises(ValidationError) as exc:
        record_payment(family, 2024, [1])
    assert "sanda_amount" in exc.value.errors
    assert Donation.query.count() == 0


def test_identical_payments_both_persist_but_month_counted_once(db, make_family):
    family = make_family()
    first = record_payment(family, 2024, [5])
    second = record_payment(family, 2024, [5])

    assert first.id != second.id
    assert Donation.query.filter_by(family_id=family.id, year=2024).count() == 2
    assert paid_months(family.id, 2024) == [5]


def test_duplicate_months_rejected_when_strict(db, make_family):
    family = make_family()
    record_payment(family, 2024, [5, 6])
    with pytest.raises(ConflictError):
        record_payment(family, 2024, [6, 7], reject_duplicates=True)
    assert Donation.query.count() == 1

    record_payment(family, 2024, [7], reject_duplicates=True)
    assert paid_months(family.id, 2024) == [5, 6, 7]


def test_update_payment_recomputes_amount_when_months_change(db, make_family):
    family = make_family(sanda_amount=Decimal("500"))
    donation = record_payment(family, 2024, [1])

    update_payment(donation, {"months_paid": [1, 2, 3]})
    assert donation.amount == Decimal("1500")
    assert paid_months(family.id, 2024) == [1, 2, 3]

    update_payment(donation, {"amount": "1200"})
    assert donation.amount == Decimal("1200")


def test_invalid_update_leaves_record_untouched(db, make_family):
    family = make_family()
    donation = record_payment(family, 2024, [1])

    with pytest.raises(ValidationError):
        update_payment(donation, {"year": 2025, "months_paid": []})
    db.session.rollback()

    assert db.session.get(Donation, donation.id).year == 2024


def test_delete_payment_only_removes_the_record(db, make_family):
    family = make_family()
    keep = record_payment(family, 2024, [1])
    drop = record_payment(family, 2024, [2])

    delete_payment(drop)

    assert paid_months(family.id, 2024) == [1]
    assert db.session.get(Donation, keep.id) is not None


def test_payment_status_summary(db, make_family):
    family = make_family(sanda_amount=Decimal("1000"))
    record_payment(family, 2024, [1, 2])

    status = payment_status(family, 2024)

    assert status["paid_months"] == [1, 2]
    assert status["unpaid_months"] == list(range(3, 13))
    assert status["paid_month_names"] == ["January", "February"]
    assert status["collected"] == 2000.0
    assert status["expected"] == 12000.0


def test_month_names_are_calendar_ordered():
    assert month_names([12, 1, 6, 1]) == ["January", "June", "December"]


def test_update_cannot_turn_payment_into_free_one(db, make_family):
    family = make_family(sanda_amount=Decimal("1000"))
    donation = record_payment(family, 2024, [1])

    family.sanda_amount = None
    with pytest.raises(ValidationError):
        update_payment(donation, {"months_paid": [1, 2]})
    db.session.rollback()

    stored = db.session.get(Donation, donation.id)
    assert stored.amount == Decimal("1000")
    assert stored.months_paid == [1]


def test_update_rejects_zero_amount(db, make_family):
    family = make_family()
    donation = record_payment(family, 2024, [1])

    with pytest.raises(ValidationError):
        update_payment(donation, {"amount": "0"})
    db.session.rollback()

    assert db.session.get(Donation, donation.id).amount == Decimal("1000")
