from flask_restful import Resource
from flask import request, g
from server.extension import db
from server.utils.decorators import role_required
from .login import api

class MeResource(Resource):
    @role_required()
    def get(self):
        return g.current_user.to_dict(only=("id", "name", "email", "role", "created_at")), 200

    @role_required()
    def patch(self):
        user = g.current_user
        data = request.get_json(silent=True) or {}

        if "name" in data:
            user.name = data["name"]
        if data.get("password"):
            user.set_password(data["password"])

        db.session.commit()
        return user.to_dict(only=("id", "name", "email", "role", "created_at")), 200

api.add_resource(MeResource, '/me')
