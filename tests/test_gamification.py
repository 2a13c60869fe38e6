"""
Tests for Gamification

Tests cover:
- Streak rule
- Achievement unlocks and rewards
- Leaderboard ordering
- Notifications produced by level-ups and achievements
"""

from datetime import date, datetime

import pytest

from codequest_app import db
from codequest_app.core.error_handlers import ConflictError, InvalidArgumentError
from codequest_app.models import Achievement, Notification, User, UserAchievement
from codequest_app.modules.gamification.logics.achievement_rules import is_unlocked, unmet_requirements
from codequest_app.modules.gamification.logics.streak_logic import advance_streak
from codequest_app.modules.gamification.services.achievement_service import AchievementService
from codequest_app.modules.gamification.services.leaderboard_service import LeaderboardService
from codequest_app.modules.gamification.services.streak_service import StreakService
from codequest_app.modules.notification.logics.payloads import achievement_payload, icon_url, level_up_payload
from codequest_app.modules.progression.services.level_service import LevelService


class StreakLogicTests:

    def test_first_activity(self):
        assert advance_streak(0, 0, None, date(2024, 1, 3)) == (1, 1)

    def test_same_day_unchanged(self):
        assert advance_streak(4, 6, date(2024, 1, 3), date(2024, 1, 3)) == (4, 6)

    def test_next_day_increments(self):
        assert advance_streak(6, 6, date(2024, 1, 2), date(2024, 1, 3)) == (7, 7)

    def test_gap_resets(self):
        assert advance_streak(6, 6, date(2023, 12, 30), date(2024, 1, 3)) == (1, 6)

    def test_accepts_datetimes(self):
        assert advance_streak(1, 1, datetime(2024, 1, 2, 23, 59), datetime(2024, 1, 3, 0, 1)) == (2, 2)


class StreakServiceTests:

    def test_consecutive_days(self, clock, make_user):
        user = make_user()
        StreakService.record_activity(user.user_id)
        clock.advance(days=1)
        StreakService.record_activity(user.user_id)
        clock.advance(days=3)
        streak = StreakService.record_activity(user.user_id)

        assert streak.current_streak == 1
        assert streak.longest_streak == 2


class AchievementRulesTests:

    def test_unmet(self):
        assert unmet_requirements({'level': 5, 'streak': 3}, {'level': 6, 'streak': 1}) == ['streak']

    def test_empty_requirements_never_unlock(self):
        assert not is_unlocked({}, {'level': 99})


class AchievementsTests:

    def test_award_once_with_reward(self, clock, make_user):
        AchievementService.create_achievement({
            'name': 'Big Spender', 'description': 'Earn 100 XP', 'icon': 'coin.png',
            'exp_reward': 25, 'requirements': {'total_xp': 100},
        })
        user = make_user()

        LevelService.add_xp(user.user_id, 60, 'Grant')
        assert UserAchievement.query.count() == 0

        LevelService.add_xp(user.user_id, 60, 'Grant')
        assert UserAchievement.query.filter_by(user_id=user.user_id).count() == 1
        assert db.session.get(User, user.user_id).total_xp == 145

        LevelService.add_xp(user.user_id, 60, 'Grant')
        assert UserAchievement.query.filter_by(user_id=user.user_id).count() == 1

    def test_achievement_notification_payload(self, app, clock, make_user):
        AchievementService.create_achievement({
            'name': 'Starter', 'description': 'Earn any XP', 'icon': 'star.png',
            'exp_reward': 0, 'requirements': {'total_xp': 1},
        })
        user = make_user()
        LevelService.add_xp(user.user_id, 5, 'Grant')

        notification = Notification.query.filter_by(
            user_id=user.user_id, type=Notification.TYPE_ACHIEVEMENT
        ).one()
        assert notification.message == "You've earned the 'Starter' achievement!"
        assert notification.meta_data['icon_url'] == app.config['ICON_BASE_URL'] + 'star.png'
        assert notification.meta_data['exp_reward'] == 0
        assert notification.meta_data['description'] == 'Earn any XP'

    def test_duplicate_name(self, app):
        AchievementService.create_achievement({'name': 'Once', 'requirements': {'level': 2}})
        with pytest.raises(ConflictError):
            AchievementService.create_achievement({'name': 'Once', 'requirements': {'level': 3}})

    def test_unknown_requirement(self, app):
        with pytest.raises(InvalidArgumentError):
            AchievementService.create_achievement({'name': 'Odd', 'requirements': {'karma': 2}})

    def test_seed_defaults_idempotent(self, app):
        added = AchievementService.seed_defaults()
        assert added == Achievement.query.count()
        assert AchievementService.seed_defaults() == 0


class LeaderboardTests:

    def test_order_level_then_xp(self, app, make_user):
        a, b, c = make_user(), make_user(), make_user()
        admin = make_user(role=User.ROLE_ADMIN)
        for user, level, xp in ((a, 2, 150), (b, 3, 400), (c, 2, 300), (admin, 50, 10 ** 6)):
            user.current_level = level
            user.total_xp = xp
        db.session.commit()

        board = LeaderboardService.get_leaderboard(limit=10)
        assert [entry['user_id'] for entry in board] == [b.user_id, c.user_id, a.user_id]

        rank = LeaderboardService.get_user_rank(a.user_id)
        assert rank['rank'] == 3
        assert rank['total_users'] == 3
        assert rank['top_percent'] == 100.0


class PayloadsTests:

    def test_icon_url(self):
        assert icon_url('/uploads/icons/', 'a.png') == '/uploads/icons/a.png'
        assert icon_url('/uploads/icons', 'a.png') == '/uploads/icons/a.png'
        assert icon_url('/uploads/icons/', None) is None
        assert icon_url('/uploads/icons/', 'https://cdn.example.com/a.png') == 'https://cdn.example.com/a.png'

    def test_achievement_payload(self):
        payload = achievement_payload('Bug Hunter', 'Fix bugs', 'bug.png', 30, '/icons/')
        assert payload == {
            'icon_url': '/icons/bug.png',
            'name': 'Bug Hunter',
            'description': 'Fix bugs',
            'exp_reward': 30,
            'message': "You've earned the 'Bug Hunter' achievement!",
        }

    def test_level_up_payload_shares_achievement_shape(self):
        payload = level_up_payload(3, 'Bug Slayer', 'Fix more bugs', None, 300, '/icons/')
        assert payload == {
            'icon_url': None,
            'name': 'Bug Slayer',
            'description': 'Fix more bugs',
            'exp_reward': 0,
            'level_number': 3,
            'exp_required': 300,
            'message': "You've reached level 3: Bug Slayer!",
        }
        assert set(achievement_payload('A', '', None, 5, '/icons/')) <= set(payload)
        assert level_up_payload(3, 'Bug Slayer', '', None, 300, '/icons/', exp_reward=25)['exp_reward'] == 25


class GamificationApiTests:

    def test_endpoints(self, client, login, clock, make_user):
        user = make_user()
        LevelService.add_xp(user.user_id, 50, 'Grant')
        login(user)

        board = client.get('/api/gamification/leaderboard').get_json()['data']['leaderboard']
        assert board[0]['is_current'] is True

        rank = client.get('/api/gamification/me/rank').get_json()['data']
        assert rank['rank'] == 1

        streak = client.get('/api/gamification/me/streak').get_json()['data']
        assert streak['current_streak'] == 0

        assert client.get('/api/gamification/me/achievements').get_json()['data'] == []

    def test_notifications_endpoints(self, client, login, clock, make_user):
        LevelService.seed_levels(5)
        user = make_user()
        LevelService.add_xp(user.user_id, 100, 'Grant')
        login(user)

        data = client.get('/api/notifications').get_json()['data']
        assert data['unread_count'] == 1
        notification_id = data['notifications'][0]['id']
        assert data['notifications'][0]['message'] == "You've reached level 2: Code Squire!"
        assert data['notifications'][0]['meta_data']['exp_reward'] == 0

        response = client.post(f'/api/notifications/{notification_id}/read')
        assert response.get_json()['data']['is_read'] is True
        assert client.get('/api/notifications?unread=1').get_json()['data']['notifications'] == []
