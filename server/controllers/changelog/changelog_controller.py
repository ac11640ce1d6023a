import logging
from flask_restful import Resource, Api, reqparse
from server.extension import db
from server.models import ChangeLog, User
from server.utils.decorators import role_required
from server.utils.roles import ROLE_ADMIN
from . import changelog_bp

logger = logging.getLogger(__name__)

api = Api(changelog_bp)


def format_changelog(changelog):
    """Attach human-readable user details to changelog output."""
    user = db.session.get(User, changelog.changed_by) if changelog.changed_by else None
    actor_info = {
        "id": user.id,
        "name": user.name,
        "role": user.role
    } if user else {"id": changelog.changed_by, "name": "System", "role": None}

    data = changelog.to_dict(only=("id", "entity_type", "entity_id", "action", "timestamp", "details"))
    data["changed_by"] = actor_info
    return data


class ChangeLogListResource(Resource):
    @role_required(ROLE_ADMIN)
    def get(self):
        parser = reqparse.RequestParser()
        parser.add_argument("entity_type", type=str, required=False, location="args")
        parser.add_argument("entity_id", type=int, required=False, location="args")
        parser.add_argument("limit", type=int, required=False, default=100, location="args")
        args = parser.parse_args()

        query = ChangeLog.query
        if args.get("entity_type"):
            query = query.filter(ChangeLog.entity_type == args["entity_type"])
        if args.get("entity_id"):
            query = query.filter(ChangeLog.entity_id == args["entity_id"])

        changelogs = query.order_by(ChangeLog.timestamp.desc(), ChangeLog.id.desc()).limit(args["limit"]).all()
        logger.info(f"Fetched {len(changelogs)} changelogs")
        return {"changelogs": [format_changelog(c) for c in changelogs]}, 200


api.add_resource(ChangeLogListResource, "/changelogs")
