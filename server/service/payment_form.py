# server/service/payment_form.py
from server.models import Family
from server.service.reconciliation import ALL_MONTHS, normalize_months, validate_year
from server.utils.errors import ValidationError


class SandaPaymentForm:
    """
    Progressive Sanda payment entry: root -> card -> year -> months.

    Each step requires the previous one and clears every step after it, so a
    form can never hold a card from another root or months from another year.
    """

    STEPS = ("root", "card", "year", "months")

    def __init__(self):
        self.root_no = None
        self.family = None
        self.year = None
        self.months = None

    @property
    def step(self):
        """Name of the next step to fill, or "complete"."""
        if self.root_no is None:
            return "root"
        if self.family is None:
            return "card"
        if self.year is None:
            return "year"
        if not self.months:
            return "months"
        return "complete"

    @property
    def is_complete(self):
        return self.step == "complete"

    def _require(self, step):
        current = self.step
        position = len(self.STEPS) if current == "complete" else self.STEPS.index(current)
        if position < self.STEPS.index(step):
            raise ValidationError(f"Complete the '{current}' step first")

    def select_root(self, root_no):
        if not root_no or not str(root_no).strip():
            raise ValidationError("Root is required", {"root_no": ["Select a root."]})
        self.root_no = str(root_no).strip()
        self.family = None
        self.year = None
        self.months = None
        return self

    def select_card(self, card_number):
        self._require("card")
        if not card_number:
            raise ValidationError("Card number is required", {"card_number": ["Select a card."]})
        family = Family.query.filter_by(card_number=str(card_number).strip()).first()
        if family is None:
            raise ValidationError(f"No payer with card {card_number}", {"card_number": ["Unknown card number."]})
        if family.root_no != self.root_no:
            raise ValidationError(
                f"Card {card_number} does not belong to {self.root_no}",
                {"card_number": ["Card is not in the selected root."]},
            )
        self.family = family
        self.year = None
        self.months = None
        return self

    def select_year(self, year):
        self._require("year")
        self.year = validate_year(year)
        self.months = None
        return self

    def select_months(self, months):
        self._require("months")
        months = normalize_months(months)
        # yearly payers always settle the whole year
        self.months = list(ALL_MONTHS) if self.family.is_yearly else months
        return self

    def to_payment(self):
        if not self.is_complete:
            raise ValidationError(f"Payment form incomplete: '{self.step}' step missing")
        return {"family": self.family, "year": self.year, "months": self.months}

    @classmethod
    def from_payload(cls, data):
        form = cls()
        form.select_root(data.get("root_no"))
        form.select_card(data.get("card_number"))
        form.select_year(data.get("year"))
        form.select_months(data.get("months_paid") or [])
        return form
