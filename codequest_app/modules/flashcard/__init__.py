from flask import Blueprint

flashcard_api_bp = Blueprint(
    'flashcard_api',
    __name__,
    url_prefix='/api/flashcards'
)

module_metadata = {
    'name': 'Flashcards',
    'category': 'Learning',
    'url_prefix': '/api/flashcards',
    'enabled': True
}


def setup_module(app):
    from . import routes  # noqa: F401
