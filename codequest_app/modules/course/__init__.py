from flask import Blueprint

course_api_bp = Blueprint(
    'course_api',
    __name__,
    url_prefix='/api/courses'
)

module_metadata = {
    'name': 'Courses',
    'category': 'Learning',
    'url_prefix': '/api/courses',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
