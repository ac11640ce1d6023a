# server/utils/receipt.py
from datetime import datetime
from server.service.reconciliation import month_names


def receipt_number(donation):
    return f"RCP-{donation.id:06d}"


def method_label(method):
    method = method or ""
    return method[:1].upper() + method[1:].replace("_", " ")


def build_receipt_details(donation):
    """Everything a receipt needs for one recorded payment; rendering happens elsewhere."""
    family = donation.family
    months = sorted(set(donation.months_paid or []))
    amount_type = family.amount_type if family else "monthly"
    return {
        "receipt_no": receipt_number(donation),
        "donation_id": donation.id,
        "donor_name": family.family_name if family else "N/A",
        "card_number": family.card_number if family else None,
        "root_no": family.root_no if family else None,
        "phone": family.phone if family else None,
        "address": family.address if family else None,
        "amount": f"{float(donation.amount):.2f}",
        "date": donation.date.isoformat() if donation.date else None,
        "method": donation.method,
        "method_label": method_label(donation.method),
        "year": donation.year,
        "months_paid": months,
        "month_names": month_names(months),
        "payment_frequency": amount_type,
        "payment_type": "Yearly Payment" if amount_type == "yearly" else "Monthly Payment",
        "generated_at": datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S"),
    }
