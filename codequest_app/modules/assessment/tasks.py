"""Background jobs of the assessment module."""
from codequest_app.db_instance import db


def sweep_expired_attempts_job(app):
    """Scheduler entry point: abandon attempts whose time ran out."""
    from .services.attempt_service import AttemptService

    with app.app_context():
        try:
            abandoned = AttemptService.sweep_expired_attempts()
            if abandoned:
                app.logger.info(f"Attempt sweep abandoned {abandoned} attempt(s)")
        except Exception as e:
            db.session.rollback()
            app.logger.error(f"Attempt sweep failed: {e}", exc_info=True)
