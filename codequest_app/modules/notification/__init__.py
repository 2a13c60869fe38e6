from flask import Blueprint

notification_api_bp = Blueprint(
    'notification_api',
    __name__,
    url_prefix='/api/notifications'
)

module_metadata = {
    'name': 'Notifications',
    'category': 'System',
    'url_prefix': '/api/notifications',
    'enabled': True
}


def setup_module(app):
    from . import events, routes  # noqa: F401
