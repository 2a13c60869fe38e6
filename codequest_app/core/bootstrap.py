"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

import logging

from flask import Flask

from ..extensions import db, login_manager, migrate, scheduler
from .error_handlers import AuthorizationError
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Configure application logging if no handlers are present."""

    if app.config.get('LOG_TO_FILE'):
        setup_logging(
            app,
            log_level=app.config.get('LOG_LEVEL', 'INFO'),
            log_dir=app.config.get('LOG_DIR'),
            json_format=app.config.get('LOG_JSON', False),
        )

    if app.logger.handlers:
        return

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)


def register_user_loader(app: Flask) -> None:
    """Wire Flask-Login to the User model."""

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        raise AuthorizationError('Authentication required', status_code=401)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)


def start_scheduler(app: Flask) -> None:
    """Start the background scheduler and register the attempt sweep job."""

    if not app.config.get('SCHEDULER_ENABLED') or app.testing:
        return

    from apscheduler.schedulers import SchedulerAlreadyRunningError

    from ..modules.assessment.tasks import sweep_expired_attempts_job

    try:
        scheduler.init_app(app)
        if not scheduler.get_job('sweep_expired_attempts'):
            scheduler.add_job(
                id='sweep_expired_attempts',
                func=sweep_expired_attempts_job,
                args=[app],
                trigger='interval',
                minutes=app.config.get('ATTEMPT_SWEEP_MINUTES', 5),
                replace_existing=True,
            )
        if not scheduler.running:
            scheduler.start()
        app.logger.info("Registered attempt sweep job (every %s minutes).", app.config.get('ATTEMPT_SWEEP_MINUTES', 5))
    except SchedulerAlreadyRunningError:
        app.logger.info("Scheduler already running, skipping re-initialisation.")


def initialize_database(app: Flask) -> None:
    """Create database tables and ensure the default admin exists."""

    from ..models import User

    db.create_all()

    admin_user = User.query.filter_by(user_role=User.ROLE_ADMIN).first()
    if admin_user is None:
        admin = User(
            username=app.config['DEFAULT_ADMIN_USERNAME'],
            email=app.config['DEFAULT_ADMIN_EMAIL'],
            user_role=User.ROLE_ADMIN,
        )
        admin.set_password(app.config['DEFAULT_ADMIN_PASSWORD'])
        db.session.add(admin)
        db.session.commit()
        app.logger.info("Created default admin user.")
    else:
        app.logger.info("Admin user already present, skipping default creation.")
