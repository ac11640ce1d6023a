from datetime import datetime
from decimal import Decimal
from sqlalchemy.exc import SQLAlchemyError
from server.models import Donation, ReminderLog, ChangeLog
from server.service import whatsapp
from server.service.reconciliation import record_payment
from server.utils.dashboard_service import DashboardService


def test_login_rejects_bad_password(client, admin):
    res = client.post("/login", json={"email": "admin@masjid.test", "password": "nope"})
    assert res.status_code == 401


def test_admin_routes_require_token(client):
    res = client.get("/families")
    assert res.status_code == 401


def test_me(client, auth_headers):
    res = client.get("/me", headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["email"] == "admin@masjid.test"


def test_family_crud_and_card_uniqueness(client, auth_headers):
    payload = {
        "family_name": "Rahman Family", "card_number": "C-100", "root_no": "Root-1",
        "sanda_amount": "1500", "amount_type": "monthly", "whatsapp_no": "",
    }
    res = client.post("/families", json=payload, headers=auth_headers)
    assert res.status_code == 201
    family = res.get_json()["family"]
    assert family["sanda_amount"] == 1500.0
    assert family["whatsapp_no"] is None

    dup = client.post("/families", json={**payload, "family_name": "Other"}, headers=auth_headers)
    assert dup.status_code == 409

    res = client.put(f"/families/{family['id']}", json={"amount_type": "yearly"}, headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["family"]["amount_type"] == "yearly"

    res = client.get("/families?search=rahman", headers=auth_headers)
    assert [f["id"] for f in res.get_json()["families"]] == [family["id"]]

    res = client.delete(f"/families/{family['id']}", headers=auth_headers)
    assert res.status_code == 200
    assert client.get(f"/families/{family['id']}", headers=auth_headers).status_code == 404


def test_family_validation_errors(client, auth_headers):
    res = client.post("/families", json={"family_name": "X", "amount_type": "weekly", "sanda_amount": "-1"},
                      headers=auth_headers)
    assert res.status_code == 400
    errors = res.get_json()["errors"]
    assert "amount_type" in errors
    assert "sanda_amount" in errors


def test_members_and_head(client, auth_headers, make_family):
    family = make_family()
    res = client.post(f"/families/{family.id}/members", json={"name": "Imran", "age": 40}, headers=auth_headers)
    assert res.status_code == 201
    assert res.get_json()["total_members"] == 1
    member_id = res.get_json()["member"]["id"]

    res = client.put(f"/families/{family.id}/head", json={"member_id": member_id}, headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["family"]["family_name"] == "Imran"
    assert res.get_json()["family"]["head_name"] == "Imran"

    other = make_family()
    res = client.put(f"/families/{other.id}/head", json={"member_id": member_id}, headers=auth_headers)
    assert res.status_code == 400

    res = client.delete(f"/members/{member_id}", headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["total_members"] == 0


def test_record_donation_through_progressive_form(client, auth_headers, make_family):
    family = make_family(card_number="C-200", root_no="Root-2", sanda_amount=Decimal("1000"))
    res = client.post("/donations", json={
        "root_no": "Root-2", "card_number": "C-200", "year": 2024,
        "months_paid": [3, 7, 11], "method": "sanda", "date": "2024-11-01",
    }, headers=auth_headers)

    assert res.status_code == 201
    body = res.get_json()
    assert body["amount"] == 3000.0
    assert body["months_paid"] == [3, 7, 11]
    assert body["family"]["card_number"] == "C-200"

    res = client.get(f"/families/{family.id}/payments?year=2024", headers=auth_headers)
    assert res.get_json()["paid_months"] == [3, 7, 11]


def test_empty_months_rejected_over_http(client, auth_headers, make_family):
    family = make_family()
    res = client.post("/donations", json={"family_id": family.id, "year": 2024, "months_paid": []},
                      headers=auth_headers)
    assert res.status_code == 400
    assert Donation.query.count() == 0


def test_duplicate_months_conflict_when_configured(app, client, auth_headers, make_family):
    app.config["SANDA_REJECT_DUPLICATE_MONTHS"] = True
    family = make_family()
    payload = {"family_id": family.id, "year": 2024, "months_paid": [5]}
    assert client.post("/donations", json=payload, headers=auth_headers).status_code == 201
    assert client.post("/donations", json=payload, headers=auth_headers).status_code == 409


def test_donation_edit_delete_and_receipt(client, auth_headers, make_family):
    family = make_family(sanda_amount=Decimal("400"))
    res = client.post("/donations", json={"family_id": family.id, "year": 2024, "months_paid": [1]},
                      headers=auth_headers)
    donation_id = res.get_json()["id"]

    res = client.patch(f"/donations/{donation_id}", json={"months_paid": [1, 2]}, headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["amount"] == 800.0

    res = client.patch(f"/donations/{donation_id}", json={"method": "barter"}, headers=auth_headers)
    assert res.status_code == 400

    res = client.get(f"/donations/{donation_id}/receipt", headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["month_names"] == ["January", "February"]

    res = client.get(f"/donations/{donation_id}/receipt?download=true", headers=auth_headers)
    assert res.status_code == 200
    assert res.headers["Content-Type"] == "application/pdf"

    assert client.delete(f"/donations/{donation_id}", headers=auth_headers).status_code == 200
    assert Donation.query.count() == 0
    assert ChangeLog.query.filter_by(entity_type="Donation", action="delete").count() == 1


def test_public_lookup(client, make_family):
    family = make_family(card_number="PUB-1", sanda_amount=Decimal("500"))
    record_payment(family, 2024, [1, 2])
    record_payment(family, 2024, [3], method="sanda")

    res = client.get("/public/lookup?card_number=PUB-1")
    assert res.status_code == 200
    body = res.get_json()
    assert body["not_found"] is False
    assert body["payer"]["card_number"] == "PUB-1"
    assert body["total_amount"] == 1500.0
    assert len(body["donations"]) == 2

    res = client.get("/public/status?card_number=PUB-1&year=2024")
    assert res.get_json()["paid_months"] == [1, 2, 3]
    assert res.get_json()["unpaid_months"] == list(range(4, 13))

    res = client.get("/public/status?card_number=PUB-1&year=2024&sanda_only=true")
    assert res.get_json()["paid_months"] == [3]


def test_public_lookup_not_found_is_distinct_from_error(client):
    res = client.get("/public/lookup?card_number=NOPE")
    assert res.status_code == 404
    assert res.get_json()["not_found"] is True
    assert "contact" in res.get_json()["message"]

    res = client.get("/public/lookup?card_number=")
    assert res.status_code == 400


def test_public_roots_and_cards(client, make_family):
    make_family(card_number="A-1", root_no="Root-1")
    make_family(card_number="A-2", root_no="Root-2")
    make_family(card_number="A-3", root_no="Root-2", status="inactive")

    assert client.get("/public/roots").get_json()["roots"] == ["Root-1", "Root-2"]
    cards = client.get("/public/roots/Root-2/cards").get_json()["cards"]
    assert [c["card_number"] for c in cards] == ["A-2"]


def test_zakat_summary_is_independent_of_list_filter(client, auth_headers):
    for payload in (
        {"type": "collection", "amount": 500, "donor_name": "Ahamed"},
        {"type": "distribution", "amount": 200, "recipient_name": "Fathima"},
        {"type": "collection", "amount": 300, "donor_name": "Rizwan"},
    ):
        assert client.post("/zakat", json=payload, headers=auth_headers).status_code == 201

    res = client.get("/zakat?type=collection&search=riz", headers=auth_headers)
    body = res.get_json()
    assert body["summary"] == {"collected": 800.0, "distributed": 200.0, "balance": 600.0}
    assert [t["donor_name"] for t in body["transactions"]] == ["Rizwan"]

    res = client.post("/zakat", json={"type": "collection", "amount": "abc"}, headers=auth_headers)
    assert res.status_code == 400


def test_reminder_run_and_logs(client, auth_headers, make_family, monkeypatch):
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "ACtest")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "token")
    monkeypatch.setenv("TWILIO_WHATSAPP_NUMBER", "+14155238886")
    monkeypatch.setattr(whatsapp, "send_whatsapp", lambda to, body, settings=None: "SM1")
    make_family()

    res = client.post("/reminders/run", json={"month": 2, "year": 2024}, headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["sent"] == 1

    res = client.get("/reminder-logs?month=2&year=2024", headers=auth_headers)
    logs = res.get_json()["logs"]
    assert len(logs) == 1
    assert logs[0]["status"] == "success"
    assert logs[0]["family"]["card_number"] == "CARD-001"

    res = client.post("/reminders/run", json={"month": 13}, headers=auth_headers)
    assert res.status_code == 400
    assert ReminderLog.query.count() == 1


def test_reminder_run_without_credentials(client, auth_headers, monkeypatch):
    monkeypatch.delenv("TWILIO_ACCOUNT_SID", raising=False)
    res = client.post("/reminders/run", json={}, headers=auth_headers)
    assert res.status_code == 500
    assert "Twilio" in res.get_json()["error"]


def test_dashboard(client, auth_headers, make_family):
    now = datetime.utcnow()
    paid = make_family(sanda_amount=Decimal("1000"))
    make_family()
    record_payment(paid, now.year, [now.month, (now.month % 12) + 1])

    res = client.get("/dashboard", headers=auth_headers)
    assert res.status_code == 200
    body = res.get_json()
    assert body["sanda"]["monthly_total"] == 1000.0
    assert body["sanda"]["members_paid"] == 1
    assert body["sanda"]["members_pending"] == 1
    assert body["registry"]["total_families"] == 2
    assert len(body["recent_donations"]) == 1
    assert body["recent_activity"][0]["entity_type"] == "Donation"


def test_dashboard_survives_activity_fetch_failure(app, monkeypatch):
    class BrokenQuery:
        def order_by(self, *args, **kwargs):
            raise SQLAlchemyError("store unavailable")

    monkeypatch.setattr(ChangeLog, "query", BrokenQuery())
    assert DashboardService.get_recent_logs() == []
