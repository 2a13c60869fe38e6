"""Application-wide extensions.

Extension instances live here so blueprints and services can import them
without circular imports.
"""

from flask_apscheduler import APScheduler
from flask_login import LoginManager
from flask_migrate import Migrate

from .db_instance import db

login_manager = LoginManager()
login_manager.session_protection = "basic"

scheduler = APScheduler()
migrate = Migrate()

__all__ = ["db", "login_manager", "scheduler", "migrate"]
