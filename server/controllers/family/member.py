from flask_restful import Resource
from flask import request
from server.extension import db
from server.models import Family, FamilyMember
from server.schemas.family_schema import FamilyMemberSchema
from server.service.family_registry import add_member, update_member, remove_member
from server.utils.decorators import role_required
from server.utils.errors import ValidationError
from server.utils.roles import ROLE_ADMIN
from .family import api

member_schema = FamilyMemberSchema()
members_schema = FamilyMemberSchema(many=True)


class FamilyMemberListResource(Resource):

    @role_required(ROLE_ADMIN)
    def get(self, family_id):
        family = db.get_or_404(Family, family_id)
        members = FamilyMember.query.filter_by(family_id=family.id).order_by(FamilyMember.created_at).all()
        return {"members": members_schema.dump(members)}, 200

    @role_required(ROLE_ADMIN)
    def post(self, family_id):
        family = db.get_or_404(Family, family_id)
        data = request.get_json(silent=True) or {}
        try:
            member = add_member(family, data)
        except ValidationError as e:
            return e.to_dict(), 400
        return {"member": member_schema.dump(member), "total_members": family.total_members}, 201


class FamilyMemberResource(Resource):

    @role_required(ROLE_ADMIN)
    def put(self, member_id):
        member = db.get_or_404(FamilyMember, member_id)
        data = request.get_json(silent=True) or {}
        try:
            update_member(member, data)
        except ValidationError as e:
            db.session.rollback()
            return e.to_dict(), 400
        return {"member": member_schema.dump(member)}, 200

    @role_required(ROLE_ADMIN)
    def delete(self, member_id):
        member = db.get_or_404(FamilyMember, member_id)
        family = member.family
        remove_member(member)
        return {
            "message": f"Member {member_id} deleted",
            "total_members": family.total_members if family else 0,
        }, 200


api.add_resource(FamilyMemberListResource, "/families/<int:family_id>/members")
api.add_resource(FamilyMemberResource, "/members/<int:member_id>")
