"""
Leaderboard Service
Global ranking by level, then XP.
"""
from codequest_app.core.error_handlers import NotFoundError
from codequest_app.db_instance import db
from codequest_app.models import User


def _ranked_query():
    return User.query.filter(User.user_role != User.ROLE_ADMIN)\
        .order_by(User.current_level.desc(), User.total_xp.desc(), User.user_id.asc())


class LeaderboardService:

    @staticmethod
    def get_leaderboard(limit=20):
        users = _ranked_query().limit(limit).all()
        return [
            {
                'rank': rank,
                'user_id': user.user_id,
                'username': user.username,
                'current_level': user.current_level or 1,
                'total_xp': user.total_xp or 0,
            }
            for rank, user in enumerate(users, start=1)
        ]

    @staticmethod
    def get_user_rank(user_id):
        """Rank of a user and the top percentage it places them in."""
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", resource='user')

        ranked = User.query.filter(User.user_role != User.ROLE_ADMIN)
        total = ranked.count()
        if user.is_admin:
            return {'user_id': user_id, 'rank': None, 'total_users': total, 'top_percent': None}

        level = user.current_level or 1
        xp = user.total_xp or 0
        ahead = ranked.filter(
            db.or_(
                User.current_level > level,
                db.and_(User.current_level == level, User.total_xp > xp),
                db.and_(User.current_level == level, User.total_xp == xp, User.user_id < user_id),
            )
        ).count()
        rank = ahead + 1
        return {
            'user_id': user_id,
            'rank': rank,
            'total_users': total,
            'top_percent': round(rank * 100.0 / total, 2) if total else None,
            'current_level': level,
            'total_xp': xp,
        }
