# server/service/whatsapp.py
import os
import logging
from twilio.rest import Client
from server.service.reconciliation import MONTH_NAMES

# sends WhatsApp messages through the Twilio API

logger = logging.getLogger(__name__)

SIGNATURE = "Masjid Donation Team"


def twilio_settings():
    settings = {
        "account_sid": os.getenv("TWILIO_ACCOUNT_SID"),
        "auth_token": os.getenv("TWILIO_AUTH_TOKEN"),
        "from_number": os.getenv("TWILIO_WHATSAPP_NUMBER"),
    }
    if not all(settings.values()):
        raise RuntimeError("Twilio credentials not configured")
    return settings


def _whatsapp(number: str) -> str:
    number = number.strip()
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


def compose_reminder(name: str, month: int, amount, amount_type: str = "monthly") -> str:
    month_name = MONTH_NAMES[month - 1]
    label = "Yearly Amount" if amount_type == "yearly" else "Monthly Amount"
    amount_text = f"{float(amount):,.2f}" if amount is not None else "N/A"
    return (
        f"அஸ்ஸலாமு அலைக்கும் {name},\n\n"
        f"இது உங்கள் {month_name} மாத சந்தா (sanda) தொகையை வழங்க நினைவூட்டும் ஒரு நட்பு செய்தி.\n"
        "தயவுசெய்து உங்களது வழக்கமான முறையில் பணம் செலுத்தவும்.\n\n"
        f"{label}: Rs. {amount_text}\n\n"
        "ஜஸாகல்லாஹு கைர்!\n"
        f"- {SIGNATURE}"
    )


def send_whatsapp(to: str, body: str, settings=None) -> str:
    """Send one message; returns the Twilio message SID. Twilio errors propagate."""
    settings = settings or twilio_settings()
    client = Client(settings["account_sid"], settings["auth_token"])
    logger.info(f"Sending WhatsApp message to {to}")
    message = client.messages.create(
        from_=_whatsapp(settings["from_number"]),
        to=_whatsapp(to),
        body=body,
    )
    return message.sid
