# File: codequest_app/config.py

import os

from dotenv import load_dotenv

load_dotenv()

# Project root: codequest_app/ sits one level below it.
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "codequest.db")


class Config:
    """Flask configuration for CodeQuest."""

    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        # Development fallback, set SECRET_KEY in production
        SECRET_KEY = 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'connect_args': {'timeout': 30},
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', '1') == '1'
    LOG_JSON = os.environ.get('LOG_JSON', '0') == '1'

    # Progression
    LEVEL_MAX = int(os.environ.get('LEVEL_MAX', 100))

    # XP rewards
    FLASHCARD_REVIEW_XP = int(os.environ.get('FLASHCARD_REVIEW_XP', 5))
    TEST_XP_PER_POINT = int(os.environ.get('TEST_XP_PER_POINT', 1))

    # Assessment
    START_ATTEMPT_RETRIES = 3
    ATTEMPT_SWEEP_MINUTES = int(os.environ.get('ATTEMPT_SWEEP_MINUTES', 5))
    SCHEDULER_ENABLED = os.environ.get('SCHEDULER_ENABLED', '1') == '1'

    # Icons are stored as relative paths and served from this base URL
    ICON_BASE_URL = os.environ.get('ICON_BASE_URL', '/uploads/icons/')

    DEFAULT_ADMIN_USERNAME = os.environ.get('DEFAULT_ADMIN_USERNAME', 'admin')
    DEFAULT_ADMIN_PASSWORD = os.environ.get('DEFAULT_ADMIN_PASSWORD', 'admin')
    DEFAULT_ADMIN_EMAIL = os.environ.get('DEFAULT_ADMIN_EMAIL', 'admin@example.com')

    # Optional callable returning the current naive-UTC datetime
    CLOCK = None

    @classmethod
    def init_app(cls, app):
        """Create the directories the app writes to."""
        if app.config['SQLALCHEMY_DATABASE_URI'] == f'sqlite:///{DATABASE_PATH}':
            os.makedirs(os.path.dirname(DATABASE_PATH), exist_ok=True)
