import os
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash

from hospital_admin.cache import TTLCache
from hospital_admin.config import config_by_name
from hospital_admin.errors import DuplicateRecord, RecordNotFound
from hospital_admin.extensions import db, migrate, login_manager, csrf, limiter

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # --- Per-app cache for settings and report statistics ---
    app.extensions["cache"] = TTLCache(
        default_ttl=app.config.get("SETTINGS_CACHE_TTL", 300)
    )

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from hospital_admin import models  # noqa: F401

    # --- Register blueprints ---
    from hospital_admin.blueprints.auth import auth_bp
    from hospital_admin.blueprints.dashboard import dashboard_bp
    from hospital_admin.blueprints.documents import documents_bp
    from hospital_admin.blueprints.people import people_bp
    from hospital_admin.blueprints.permits import permits_bp
    from hospital_admin.blueprints.registrations import registrations_bp
    from hospital_admin.blueprints.reports import reports_bp
    from hospital_admin.blueprints.settings import settings_bp
    from hospital_admin.blueprints.tasks import tasks_bp
    from hospital_admin.blueprints.users import users_bp

    api_blueprints = [
        dashboard_bp,
        documents_bp,
        people_bp,
        permits_bp,
        registrations_bp,
        reports_bp,
        settings_bp,
        tasks_bp,
        users_bp,
    ]
    app.register_blueprint(auth_bp)
    for bp in api_blueprints:
        app.register_blueprint(bp)
        # JSON API: session cookie or Bearer token, no HTML forms
        csrf.exempt(bp)

    # --- Root route ---
    @app.route("/")
    def index():
        return jsonify({"name": "hospital-admin", "status": "ok"})

    # --- Local file serving (dev only) ---
    if app.debug:
        @app.route("/uploads/<path:filepath>")
        def serve_upload(filepath):
            """Serve uploaded files from instance/uploads in dev mode."""
            from flask import send_from_directory
            upload_dir = os.path.join(app.instance_path, "uploads")
            return send_from_directory(upload_dir, filepath)

    register_error_handlers(app)
    register_security_headers(app)
    register_cli(app)

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    # JSON API plus Supabase-hosted document previews
    "Content-Security-Policy": (
        "default-src 'self'; "
        "img-src 'self' data: https://*.supabase.co; "
        "base-uri 'self'; "
        "frame-ancestors 'none';"
    ),
}


def register_security_headers(app):
    @app.after_request
    def add_security_headers(response):
        response.headers.update(SECURITY_HEADERS)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


def register_error_handlers(app):
    """Map service exceptions and HTTP errors to JSON bodies.

    Service errors roll the session back before answering.
    """

    @app.errorhandler(RecordNotFound)
    def record_not_found(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(DuplicateRecord)
    def duplicate_record(e):
        db.session.rollback()
        return jsonify({
            "error": str(e),
            "code": e.code,
            "existing_id": e.existing_id,
        }), 409

    @app.errorhandler(ValueError)
    def invalid_value(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500


DEMO_TASKS = [
    ("License Renewal Processing", "pending", "high", "Administrative", "Dr. Samuel", 0),
    ("Patient Record Verification", "in-progress", "medium", "Records", "Nurse Johnson", 1),
    ("Medical Supply Inventory", "pending", "medium", "Inventory", "Store Manager", 7),
    ("Staff Training Documentation", "completed", "low", "Training", "HR Director", None),
    ("Equipment Maintenance Schedule", "pending", "medium", "Maintenance", "Maintenance Head", 7),
    ("Insurance Claim Processing", "in-progress", "high", "Finance", "Finance Officer", 3),
    ("Department Budget Review", "pending", "low", "Finance", "Finance Director", 30),
    ("Medication Error Report", "pending", "high", "Quality", "Quality Officer", 1),
    ("New Staff Orientation", "in-progress", "medium", "HR", "HR Assistant", 4),
]


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("seed-admin")
    @click.option("--email", default="admin@hospital.local", help="Admin email")
    @click.option("--password", default="admin123", help="Admin password")
    def seed_admin(email, password):
        """Create (or promote) the admin user.

        Usage:
            flask seed-admin
            flask seed-admin --email admin@example.com --password s3cret
        """
        from hospital_admin.models.user import User

        existing = User.query.filter_by(email=email.lower()).first()
        if existing:
            existing.role = "ADMIN"
            db.session.commit()
            click.echo(f"Admin user already exists: {email}")
            return

        admin = User(
            email=email.lower(),
            password_hash=generate_password_hash(password),
            full_name="Admin",
            role="ADMIN",
        )
        db.session.add(admin)
        db.session.commit()
        click.echo(f"Created admin user: {email}")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Fill the task board with the demo hospital tasks.

        Skips titles that already exist, so it is safe to re-run.
        """
        from datetime import date, timedelta

        from hospital_admin.models.task import Task
        from hospital_admin.services import task_service

        created = 0
        for title, status, priority, category, assignee, due_in in DEMO_TASKS:
            if Task.query.filter_by(title=title).first():
                continue
            task_service.create_task(
                None,
                title,
                status=status,
                priority=priority,
                category=category,
                assignee=assignee,
                due_date=date.today() + timedelta(days=due_in) if due_in is not None else None,
            )
            created += 1
        db.session.commit()

        click.echo("")
        click.echo("=" * 60)
        click.echo(f"Demo tasks created: {created} (skipped {len(DEMO_TASKS) - created})")
        click.echo("=" * 60)

    @app.cli.command("send-expiry-alerts")
    @click.option("--dry-run", is_flag=True, help="Show what would be sent without actually sending.")
    def send_expiry_alerts(dry_run):
        """Email a digest of permits, documents and papers about to expire.

        Usage:
            flask send-expiry-alerts
            flask send-expiry-alerts --dry-run
        """
        from hospital_admin.services.alert_service import process_expiry_alerts
        process_expiry_alerts(dry_run=dry_run)
