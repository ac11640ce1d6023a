from flask_restful import Resource, Api
from server.utils.dashboard_service import DashboardService
from server.utils.decorators import role_required
from server.utils.roles import ROLE_ADMIN
from . import dashboard_bp

api = Api(dashboard_bp)


class AdminDashboard(Resource):
    @role_required(ROLE_ADMIN)
    def get(self):
        return DashboardService.build(), 200


api.add_resource(AdminDashboard, "/dashboard")
