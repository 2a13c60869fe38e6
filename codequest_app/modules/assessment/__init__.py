from flask import Blueprint

assessment_api_bp = Blueprint(
    'assessment_api',
    __name__,
    url_prefix='/api/tests'
)

module_metadata = {
    'name': 'Tests & Exams',
    'category': 'Assessment',
    'url_prefix': '/api/tests',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
