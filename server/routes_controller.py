from server.controllers.auth import auth_bp
from server.controllers.family import family_bp
from server.controllers.donation import donation_bp
from server.controllers.zakat import zakat_bp
from server.controllers.reminder import reminder_bp
from server.controllers.public import public_bp
from server.controllers.dashboard import dashboard_bp
from server.controllers.changelog import changelog_bp

def register_routes(app):
    app.register_blueprint(auth_bp)
    app.register_blueprint(family_bp)
    app.register_blueprint(donation_bp)
    app.register_blueprint(zakat_bp)
    app.register_blueprint(reminder_bp)
    app.register_blueprint(public_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(changelog_bp)
