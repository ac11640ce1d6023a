from flask_restful import Resource, Api
from flask import request
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy import or_
from server.extension import db
from server.models import Family
from server.schemas.family_schema import FamilySchema, FamilyDetailSchema, FamilyInputSchema
from server.service.reconciliation import payment_status, validate_year
from server.service.family_registry import set_family_head, recount_members
from server.utils.change_logger import log_change
from server.utils.decorators import role_required
from server.utils.errors import ValidationError
from server.utils.roles import ROLE_ADMIN
from datetime import datetime
from . import family_bp

api = Api(family_bp)

family_schema = FamilySchema()
families_schema = FamilySchema(many=True)
family_detail_schema = FamilyDetailSchema()
family_input_schema = FamilyInputSchema()


def card_taken(card_number, exclude_id=None):
    if not card_number:
        return False
    query = Family.query.filter(Family.card_number == card_number)
    if exclude_id is not None:
        query = query.filter(Family.id != exclude_id)
    return db.session.query(query.exists()).scalar()


class FamilyListResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self):
        query = Family.query
        search = (request.args.get("search") or "").strip()
        if search:
            like = f"%{search}%"
            query = query.filter(or_(
                Family.family_name.ilike(like),
                Family.card_number.ilike(like),
                Family.root_no.ilike(like),
            ))
        if request.args.get("root_no"):
            query = query.filter(Family.root_no == request.args["root_no"])
        if request.args.get("status"):
            query = query.filter(Family.status == request.args["status"])
        if request.args.get("payers_only", "false").lower() == "true":
            query = query.filter(Family.card_number.isnot(None))

        families = query.order_by(Family.family_name).all()
        return {"families": families_schema.dump(families)}, 200

    @role_required(ROLE_ADMIN)
    def post(self):
        data = request.get_json(silent=True) or {}
        try:
            cleaned = family_input_schema.load(data)
        except SchemaValidationError as e:
            return {"errors": e.messages}, 400

        if card_taken(cleaned.get("card_number")):
            return {"message": f"Card number {cleaned['card_number']} is already assigned"}, 409

        family = Family(**cleaned)
        db.session.add(family)
        db.session.flush()
        log_change("Family", family.id, "create", family_schema.dump(family))
        db.session.commit()

        return {"family": family_schema.dump(family)}, 201


class FamilyResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self, family_id):
        family = db.get_or_404(Family, family_id)
        return {"family": family_detail_schema.dump(family)}, 200

    @role_required(ROLE_ADMIN)
    def put(self, family_id):
        family = db.get_or_404(Family, family_id)
        data = request.get_json(silent=True) or {}
        try:
            cleaned = family_input_schema.load(data, partial=True)
        except SchemaValidationError as e:
            return {"errors": e.messages}, 400

        if card_taken(cleaned.get("card_number"), exclude_id=family.id):
            return {"message": f"Card number {cleaned['card_number']} is already assigned"}, 409

        for key, value in cleaned.items():
            setattr(family, key, value)

        log_change("Family", family.id, "update", family_schema.dump(family))
        db.session.commit()

        return {"family": family_schema.dump(family)}, 200

    @role_required(ROLE_ADMIN)
    def delete(self, family_id):
        family = db.get_or_404(Family, family_id)

        log_change("Family", family.id, "delete", family_schema.dump(family))
        db.session.delete(family)
        db.session.commit()

        return {"message": f"Family {family_id} deleted"}, 200


class FamilyHeadResource(Resource):

    @role_required(ROLE_ADMIN)
    def put(self, family_id):
        family = db.get_or_404(Family, family_id)
        data = request.get_json(silent=True) or {}
        try:
            set_family_head(family, data.get("member_id"))
        except ValidationError as e:
            db.session.rollback()
            return e.to_dict(), 400
        return {"family": family_schema.dump(family)}, 200


class FamilyRecountResource(Resource):

    @role_required(ROLE_ADMIN)
    def post(self, family_id):
        family = db.get_or_404(Family, family_id)
        total = recount_members(family)
        return {"family_id": family.id, "total_members": total}, 200


class FamilyPaymentStatusResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self, family_id):
        family = db.get_or_404(Family, family_id)
        try:
            year = validate_year(request.args.get("year", datetime.utcnow().year, type=int))
        except ValidationError as e:
            return e.to_dict(), 400
        return payment_status(family, year), 200


api.add_resource(FamilyListResource, "/families")
api.add_resource(FamilyResource, "/families/<int:family_id>")
api.add_resource(FamilyHeadResource, "/families/<int:family_id>/head")
api.add_resource(FamilyRecountResource, "/families/<int:family_id>/recount")
api.add_resource(FamilyPaymentStatusResource, "/families/<int:family_id>/payments")
