import os
import sys
from datetime import datetime, timedelta

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from codequest_app import create_app, db
from codequest_app.config import Config
from codequest_app.models import User


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    LOG_TO_FILE = False
    SCHEDULER_ENABLED = False


class FrozenClock:
    """Callable clock for the CLOCK config key."""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock(app):
    frozen = FrozenClock(datetime(2024, 3, 1, 9, 0, 0))
    app.config['CLOCK'] = frozen
    return frozen


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(role=User.ROLE_STUDENT, username=None, password='password'):
        counter['n'] += 1
        username = username or f'{role}{counter["n"]}'
        user = User(username=username, email=f'{username}@example.com', user_role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def login(client):
    def _login(user, password='password'):
        response = client.post('/api/auth/login', json={'username': user.username, 'password': password})
        assert response.status_code == 200, response.get_json()
        return response

    return _login
