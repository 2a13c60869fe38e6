from flask import Blueprint

progression_api_bp = Blueprint(
    'progression_api',
    __name__,
    url_prefix='/api/levels'
)

module_metadata = {
    'name': 'Levels & XP',
    'category': 'Gamification',
    'url_prefix': '/api/levels',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
