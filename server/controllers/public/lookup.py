from datetime import datetime
from flask_restful import Resource, Api
from flask import request
from server.extension import db
from server.models import Family, Donation
from server.schemas.donation_schema import DonationSchema
from server.service.reconciliation import payment_status, validate_year
from server.utils.errors import ValidationError, NotFoundError
from server.utils.helper import money
from . import public_bp

api = Api(public_bp)

donations_schema = DonationSchema(many=True, exclude=("family", "notes"))

NOT_FOUND_MESSAGE = "No record found for this card number. Please contact the mosque admin."

PUBLIC_FIELDS = ("family_name", "card_number", "root_no", "amount_type", "status")


def find_payer(card_number):
    card_number = (card_number or "").strip()
    if not card_number:
        raise ValidationError("Please enter a card number", {"card_number": ["Missing card number."]})
    family = Family.query.filter_by(card_number=card_number).first()
    if family is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return family


def public_profile(family):
    data = {key: getattr(family, key) for key in PUBLIC_FIELDS}
    data["sanda_amount"] = money(family.sanda_amount) if family.sanda_amount is not None else None
    return data


def not_found(e):
    return {"not_found": True, "message": e.message}, 404


class PublicLookup(Resource):
    def get(self):
        try:
            family = find_payer(request.args.get("card_number"))
        except ValidationError as e:
            return e.to_dict(), 400
        except NotFoundError as e:
            return not_found(e)

        donations = (
            Donation.query.filter_by(family_id=family.id)
            .order_by(Donation.date.desc(), Donation.id.desc())
            .all()
        )
        return {
            "not_found": False,
            "payer": public_profile(family),
            "donations": donations_schema.dump(donations),
            "total_amount": money(sum((d.amount for d in donations), 0)),
        }, 200


class PublicPaymentStatus(Resource):
    def get(self):
        try:
            family = find_payer(request.args.get("card_number"))
            year = validate_year(request.args.get("year", datetime.utcnow().year, type=int))
        except ValidationError as e:
            return e.to_dict(), 400
        except NotFoundError as e:
            return not_found(e)

        method = "sanda" if request.args.get("sanda_only", "false").lower() == "true" else None
        status = payment_status(family, year, method=method)
        status["payer"] = public_profile(family)
        return status, 200


class PublicRoots(Resource):
    def get(self):
        rows = (
            db.session.query(Family.root_no)
            .filter(Family.root_no.isnot(None), Family.card_number.isnot(None), Family.status == "active")
            .distinct()
            .order_by(Family.root_no)
            .all()
        )
        return {"roots": [root for (root,) in rows]}, 200


class PublicRootCards(Resource):
    def get(self, root_no):
        families = (
            Family.query.filter(
                Family.root_no == root_no,
                Family.card_number.isnot(None),
                Family.status == "active",
            )
            .order_by(Family.card_number)
            .all()
        )
        return {
            "root_no": root_no,
            "cards": [{"card_number": f.card_number, "family_name": f.family_name} for f in families],
        }, 200


api.add_resource(PublicLookup, "/lookup")
api.add_resource(PublicPaymentStatus, "/status")
api.add_resource(PublicRoots, "/roots")
api.add_resource(PublicRootCards, "/roots/<string:root_no>/cards")
