from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from server.extension import db, migrate, jwt, ma
from server.routes_controller import register_routes
import os
from datetime import timedelta
import logging


load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

DEFAULT_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def _env_flag(name, default="false"):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def create_app(test_config=None):
    app = Flask(__name__)

    # errors raised in Resources reach the JWT and app error handlers
    app.config["PROPAGATE_EXCEPTIONS"] = True

    # JWT Configuration
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "fallback-secret-key")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=24)
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["JWT_HEADER_NAME"] = "Authorization"
    app.config["JWT_HEADER_TYPE"] = "Bearer"

    # Database Configuration
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///sanda.db")
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        "pool_pre_ping": True
    }

    # Sanda settings
    app.config["SCHEDULER_ENABLED"] = _env_flag("SCHEDULER_ENABLED")
    app.config["SANDA_REMINDER_DAY"] = int(os.getenv("SANDA_REMINDER_DAY", "5"))
    app.config["SANDA_REJECT_DUPLICATE_MONTHS"] = _env_flag("SANDA_REJECT_DUPLICATE_MONTHS")
    app.config["SEED_ADMIN"] = _env_flag("SEED_ADMIN", "true")
    app.config["CORS_ORIGINS"] = os.getenv("CORS_ORIGINS", DEFAULT_ORIGINS)

    app.config.from_prefixed_env()
    if test_config:
        app.config.update(test_config)

    CORS(app,
         supports_credentials=True,
         origins=[o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()],
         methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization"],
         expose_headers=["Authorization"],
         max_age=3600
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)

    with app.app_context():
        db.create_all()
        if app.config["SEED_ADMIN"]:
            from server.seed import seed
            seed()

    # Register routes
    register_routes(app)

    if app.config["SCHEDULER_ENABLED"] and not app.config.get("TESTING"):
        from server.scheduler import init_scheduler
        app.extensions["sanda_scheduler"] = init_scheduler(app)

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(e):
        db.session.rollback()
        app.logger.error(f"Database error: {e}", exc_info=True)
        return jsonify({"error": "Database error, please try again"}), 500

    @app.errorhandler(Exception)
    def handle_error(e):
        if isinstance(e, HTTPException):
            return e
        app.logger.error(f"Unhandled error: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    @app.route('/')
    def home():
        return {"message": "Welcome to the Masjid Sanda API"}

    # Add JWT error handlers
    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return {
            "message": "Invalid token",
            "error": str(error)
        }, 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return {
            "message": "Missing authorization token",
            "error": str(error)
        }, 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return {"message": "Token has expired"}, 401

    return app
