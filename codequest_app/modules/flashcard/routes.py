from flask import request
from flask_login import current_user, login_required

from codequest_app.core.error_handlers import InvalidArgumentError, success_response
from codequest_app.models import User
from ..access_control.decorators import require_role
from . import flashcard_api_bp
from .services.review_service import ReviewService


@flashcard_api_bp.route('', methods=['POST'])
@login_required
@require_role(User.ROLE_TEACHER)
def create_flashcard():
    data = request.get_json(silent=True) or {}
    card = ReviewService.create_flashcard(current_user.user_id, data)
    return success_response(card.to_dict(), message='Flashcard created', status_code=201)


@flashcard_api_bp.route('/due', methods=['GET'])
@login_required
def due_cards():
    """Cards to study now for the current user."""
    limit = request.args.get('limit', 20, type=int)
    if limit < 1:
        raise InvalidArgumentError("'limit' must be positive")

    items = []
    for card, progress in ReviewService.get_due_cards(current_user.user_id, limit):
        entry = card.to_dict()
        entry['progress'] = progress.to_dict() if progress else None
        items.append(entry)
    return success_response({'cards': items, 'count': len(items)})


@flashcard_api_bp.route('/<int:flashcard_id>/review', methods=['POST'])
@login_required
def review_card(flashcard_id):
    data = request.get_json(silent=True) or {}
    if 'quality' not in data:
        raise InvalidArgumentError("'quality' is required")

    progress = ReviewService.record_review(current_user.user_id, flashcard_id, data['quality'])
    return success_response(progress.to_dict())


@flashcard_api_bp.route('/<int:flashcard_id>/progress', methods=['GET'])
@login_required
def card_progress(flashcard_id):
    progress = ReviewService.get_progress(current_user.user_id, flashcard_id)
    return success_response(progress.to_dict())
