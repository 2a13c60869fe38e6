from flask import request
from flask_login import current_user, login_required

from codequest_app.core.error_handlers import InvalidArgumentError, success_response
from codequest_app.models import User
from ..access_control.decorators import require_role
from . import progression_api_bp
from .services.level_service import LevelService


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgumentError('Request body must be a JSON object')
    return data


@progression_api_bp.route('', methods=['GET'])
@login_required
def list_levels():
    """Full level table ordered by level number."""
    levels = LevelService.get_levels()
    return success_response([level.to_dict() for level in levels])


@progression_api_bp.route('', methods=['POST'])
@login_required
@require_role(User.ROLE_ADMIN)
def create_level():
    level = LevelService.create_level(_json_body())
    return success_response(level.to_dict(), message='Level created', status_code=201)


@progression_api_bp.route('/me', methods=['GET'])
@login_required
def my_level():
    info = LevelService.get_user_level_info(current_user.user_id)
    return success_response(info.to_dict())


@progression_api_bp.route('/me/history', methods=['GET'])
@login_required
def my_xp_history():
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', 20, type=int)

    items, total = LevelService.get_xp_history(current_user.user_id, page, per_page)
    return success_response({
        'transactions': [item.to_dict() for item in items],
        'total': total,
        'page': page,
        'per_page': per_page,
    })


@progression_api_bp.route('/progression', methods=['GET'])
@login_required
def level_progression():
    max_level = request.args.get('max_level', type=int)
    return success_response(LevelService.get_level_progression(max_level))


@progression_api_bp.route('/<int:level_number>', methods=['GET'])
@login_required
def get_level(level_number):
    return success_response(LevelService.get_level(level_number).to_dict())


@progression_api_bp.route('/<int:level_number>', methods=['PUT'])
@login_required
@require_role(User.ROLE_ADMIN)
def update_level(level_number):
    level = LevelService.update_level(level_number, _json_body())
    return success_response(level.to_dict(), message='Level updated')


@progression_api_bp.route('/<int:level_number>', methods=['DELETE'])
@login_required
@require_role(User.ROLE_ADMIN)
def delete_level(level_number):
    LevelService.delete_level(level_number)
    return success_response(message='Level deleted')
