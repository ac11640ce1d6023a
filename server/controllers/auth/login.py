from flask_restful import Resource, Api
from server.models import User
from flask_jwt_extended import create_access_token
from server.utils.helper import parse_json
from . import auth_bp

api = Api(auth_bp)

class Login(Resource):
    def post(self):
        data, error, status = parse_json(["email", "password"])
        if error:
            return error, status
        email = data["email"]
        password = data["password"]

        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user or not user.check_password(password):
            return {"message": "Invalid credentials"}, 401

        access_token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role}
        )

        return {
            "access_token": access_token,
            "user": {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role,
            },
        }, 200

api.add_resource(Login, '/login')
