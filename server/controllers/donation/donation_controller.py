from flask_restful import Resource, Api
from flask import request, current_app
from sqlalchemy import or_
from sqlalchemy.orm import joinedload
from server.extension import db
from server.models import Donation, Family
from server.schemas.donation_schema import DonationSchema
from server.service.payment_form import SandaPaymentForm
from server.service.reconciliation import record_payment, update_payment, delete_payment
from server.utils.decorators import role_required
from server.utils.errors import ValidationError, ConflictError
from server.utils.roles import ROLE_ADMIN
from . import donation_bp

api = Api(donation_bp)

# Schemas
donation_schema = DonationSchema()
donations_schema = DonationSchema(many=True)


def resolve_payment(data):
    """
    Turn a create payload into record_payment arguments.

    Either the progressive form (root_no + card_number) or a direct family_id.
    """
    if data.get("root_no") or data.get("card_number"):
        return SandaPaymentForm.from_payload(data).to_payment()

    family = db.session.get(Family, data.get("family_id")) if data.get("family_id") else None
    if family is None:
        raise ValidationError("Payer is required", {"family_id": ["Unknown payer."]})
    return {"family": family, "year": data.get("year"), "months": data.get("months_paid") or []}


class DonationListResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self):
        query = Donation.query.options(joinedload(Donation.family)).join(Family)

        if request.args.get("family_id"):
            query = query.filter(Donation.family_id == request.args.get("family_id", type=int))
        if request.args.get("year"):
            query = query.filter(Donation.year == request.args.get("year", type=int))
        if request.args.get("method"):
            query = query.filter(Donation.method == request.args["method"])
        search = (request.args.get("search") or "").strip()
        if search:
            like = f"%{search}%"
            query = query.filter(or_(Family.family_name.ilike(like), Family.card_number.ilike(like)))

        donations = query.order_by(Donation.date.desc(), Donation.id.desc()).all()
        return {"donations": donations_schema.dump(donations)}, 200

    @role_required(ROLE_ADMIN)
    def post(self):
        data = request.get_json(silent=True) or {}
        try:
            payment = resolve_payment(data)
            donation = record_payment(
                payment["family"],
                payment["year"],
                payment["months"],
                method=data.get("method", "cash"),
                date=data.get("date"),
                notes=data.get("notes"),
                reject_duplicates=current_app.config.get("SANDA_REJECT_DUPLICATE_MONTHS", False),
            )
        except ValidationError as e:
            return e.to_dict(), 400
        except ConflictError as e:
            return {"message": e.message}, 409

        return donation_schema.dump(donation), 201


class DonationResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self, donation_id):
        donation = db.get_or_404(Donation, donation_id)
        return donation_schema.dump(donation), 200

    @role_required(ROLE_ADMIN)
    def patch(self, donation_id):
        donation = db.get_or_404(Donation, donation_id)
        data = request.get_json(silent=True) or {}
        try:
            update_payment(donation, data)
        except ValidationError as e:
            db.session.rollback()
            return e.to_dict(), 400
        return donation_schema.dump(donation), 200

    @role_required(ROLE_ADMIN)
    def delete(self, donation_id):
        donation = db.get_or_404(Donation, donation_id)
        delete_payment(donation)
        return {"message": f"Donation {donation_id} deleted"}, 200


api.add_resource(DonationListResource, "/donations")
api.add_resource(DonationResource, "/donations/<int:donation_id>")
