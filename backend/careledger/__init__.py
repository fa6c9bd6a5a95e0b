# backend/careledger/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate, reconciler, remote


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    remote.init_app(app)
    reconciler.init_app(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints (importing the routes registers the collection loaders)
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.orders import orders_bp
    from .routes.hospital import hospital_bp
    from .routes.blood import blood_bp
    from .routes.support import support_bp
    from .routes.doctors import doctors_bp
    from .routes.admin import admin_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(hospital_bp)
    app.register_blueprint(blood_bp)
    app.register_blueprint(support_bp)
    app.register_blueprint(doctors_bp)
    app.register_blueprint(admin_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
