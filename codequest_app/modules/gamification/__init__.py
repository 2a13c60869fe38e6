from flask import Blueprint

gamification_api_bp = Blueprint(
    'gamification_api',
    __name__,
    url_prefix='/api/gamification'
)

module_metadata = {
    'name': 'Gamification',
    'category': 'Gamification',
    'url_prefix': '/api/gamification',
    'enabled': True
}


def setup_module(app):
    from . import events, routes  # noqa: F401
