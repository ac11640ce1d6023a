from reportlab.lib.pagesizes import A5
from reportlab.pdfgen import canvas
from reportlab.lib.utils import simpleSplit
from io import BytesIO
from datetime import datetime

MOSQUE_NAME = "MASJID AL-AHSAN"
MOSQUE_REG = "Regd No: R/2327/K/253"

def generate_receipt_pdf(details):
    """
    Generate an A5 Sanda payment receipt.

    Args:
        details (dict): output of build_receipt_details.

    Returns:
        BytesIO: PDF buffer
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A5)
    width, height = A5
    margin = 40
    line_height = 15
    y = height - margin

    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(width / 2, y, MOSQUE_NAME)
    y -= 14
    c.setFont("Helvetica", 8)
    c.drawCentredString(width / 2, y, MOSQUE_REG)
    y -= 24

    c.setFont("Helvetica-Bold", 12)
    c.drawCentredString(width / 2, y, "SANDA PAYMENT RECEIPT")
    y -= 22

    c.setFont("Helvetica", 9)
    c.drawString(margin, y, f"Receipt No: {details.get('receipt_no', 'N/A')}")
    c.drawRightString(width - margin, y, f"Date: {details.get('date') or 'N/A'}")
    y -= 12
    c.line(margin, y, width - margin, y)
    y -= 20

    def field(label, value):
        nonlocal y
        c.setFont("Helvetica-Bold", 9)
        c.drawString(margin, y, f"{label}:")
        c.setFont("Helvetica", 9)
        c.drawString(margin + 90, y, str(value))
        y -= line_height

    c.setFont("Helvetica-Bold", 10)
    c.drawString(margin, y, "Donor Information")
    y -= line_height + 3
    field("Name", details.get("donor_name", "N/A"))
    field("Card No", details.get("card_number") or "N/A")
    if details.get("root_no"):
        field("Root No", details["root_no"])
    if details.get("phone"):
        field("Phone", details["phone"])
    y -= 5
    c.line(margin, y, width - margin, y)
    y -= 20

    c.setFont("Helvetica-Bold", 10)
    c.drawString(margin, y, "Payment Details")
    y -= line_height + 3
    field("Year", details.get("year", "N/A"))
    field("Payment Type", details.get("payment_type", "N/A"))
    field("Method", details.get("method_label", "N/A"))

    names = details.get("month_names") or []
    if names:
        c.setFont("Helvetica-Bold", 9)
        c.drawString(margin, y, "Months Paid:")
        y -= line_height
        c.setFont("Helvetica", 9)
        for line in simpleSplit(", ".join(names), "Helvetica", 9, width - 2 * margin):
            c.drawString(margin, y, line)
            y -= line_height

    y -= 10
    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, y, f"Amount Paid: Rs. {details.get('amount', '0.00')}")
    y -= 30

    c.setFont("Helvetica", 7)
    generated_at = details.get("generated_at", datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S"))
    c.drawCentredString(width / 2, y, f"Generated At: {generated_at}")
    c.drawCentredString(width / 2, y - 10, "JazakAllahu Khairan for your contribution")

    c.showPage()
    c.save()
    buffer.seek(0)
    return buffer
