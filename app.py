import logging

import click
from flask import Flask, request, g, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from models.user import User, Role
from routes import health_bp, auth_bp, court_bp, timeslot_bp, booking_bp, admin_bp
from security.csrf import csrf_failure
from security.rbac import ADMIN
from services.errors import BookingError
from utils.audit import log_event
from utils.auth_context import load_current_user
from utils.seed import seed_roles, seed_default_time_slots, seed_sample_courts

CSRF_EXEMPT_PATHS = {
    "/auth/login",
    "/auth/register",
    "/health",
}


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(court_bp)
    app.register_blueprint(timeslot_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    with app.app_context():
        if app.config.get("CREATE_TABLES_ON_STARTUP"):
            db.create_all()
        # Seed default roles at startup (safe & idempotent)
        seed_roles()

    @app.before_request
    def _load_user():
        load_current_user()

    @app.before_request
    def _csrf_protect():
        # Only state-changing requests of cookie-authenticated users
        if request.method not in ("POST", "PUT", "PATCH", "DELETE"):
            return None
        if request.path in CSRF_EXEMPT_PATHS:
            return None
        if getattr(g, "user", None) is not None:
            return csrf_failure()
        return None

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_error_handlers(app)
    register_cli(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(BookingError)
    def _booking_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(Exception)
    def _unexpected_error(err):
        if isinstance(err, HTTPException):
            return err
        db.session.rollback()
        app.logger.error("Unhandled exception on %s %s", request.method, request.path, exc_info=err)
        return jsonify(error="Internal server error"), 500


def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to ADMIN by email (bootstrap)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return

        admin_role = Role.query.filter_by(name=ADMIN).first()
        if not admin_role:
            admin_role = Role(name=ADMIN)
            db.session.add(admin_role)

        if admin_role not in user.roles:
            user.roles.append(admin_role)
        db.session.commit()

        log_event("CLI_MAKE_ADMIN", user_id=user.id, entity="user", entity_id=user.id)
        click.echo(f"{user.email} promoted to ADMIN")

    @app.cli.command("seed-timeslots")
    def seed_timeslots():
        """Create the default weekly time slot template over business hours."""
        created = seed_default_time_slots(
            app.config.get("BUSINESS_HOURS_START", 6),
            app.config.get("BUSINESS_HOURS_END", 22),
        )
        if created:
            click.echo(f"Created {created} default time slots")
        else:
            click.echo("Time slots already exist. Skipping creation.")

    @app.cli.command("seed-courts")
    def seed_courts():
        """Add the sample courts to an empty database."""
        created = seed_sample_courts()
        if created:
            click.echo(f"Added {created} courts")
        else:
            click.echo("Courts already exist. Skipping creation.")


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
