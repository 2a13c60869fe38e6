from flask import request
from flask_login import current_user, login_required

from codequest_app.core.error_handlers import success_response
from codequest_app.models import User
from ..access_control.decorators import require_role
from . import gamification_api_bp
from .services.achievement_service import AchievementService
from .services.leaderboard_service import LeaderboardService
from .services.streak_service import StreakService


@gamification_api_bp.route('/leaderboard', methods=['GET'])
@login_required
def get_leaderboard():
    """Global leaderboard by level, then XP."""
    limit = request.args.get('limit', 20, type=int)
    data = LeaderboardService.get_leaderboard(limit=max(1, limit))
    for entry in data:
        entry['is_current'] = entry['user_id'] == current_user.user_id
    return success_response({'leaderboard': data})


@gamification_api_bp.route('/me/rank', methods=['GET'])
@login_required
def my_rank():
    return success_response(LeaderboardService.get_user_rank(current_user.user_id))


@gamification_api_bp.route('/achievements', methods=['GET'])
@login_required
def list_achievements():
    return success_response([a.to_dict() for a in AchievementService.get_achievements()])


@gamification_api_bp.route('/achievements', methods=['POST'])
@login_required
@require_role(User.ROLE_ADMIN)
def create_achievement():
    achievement = AchievementService.create_achievement(request.get_json(silent=True) or {})
    return success_response(achievement.to_dict(), message='Achievement created', status_code=201)


@gamification_api_bp.route('/me/achievements', methods=['GET'])
@login_required
def my_achievements():
    if request.args.get('progress', type=int):
        return success_response(AchievementService.get_progress(current_user.user_id))
    earned = AchievementService.get_user_achievements(current_user.user_id)
    return success_response([row.to_dict() for row in earned])


@gamification_api_bp.route('/me/streak', methods=['GET'])
@login_required
def my_streak():
    streak = StreakService.get_user_streak(current_user.user_id)
    if streak is None:
        return success_response({
            'user_id': current_user.user_id,
            'current_streak': 0,
            'longest_streak': 0,
            'last_activity_date': None,
        })
    return success_response(streak.to_dict())
