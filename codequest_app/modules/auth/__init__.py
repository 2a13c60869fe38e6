from flask import Blueprint

auth_api_bp = Blueprint(
    'auth_api',
    __name__,
    url_prefix='/api/auth'
)

module_metadata = {
    'name': 'Authentication',
    'category': 'System',
    'url_prefix': '/api/auth',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
