"""
Level Service
Level table management and XP awarding.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from codequest_app.core import clock
from codequest_app.core.error_handlers import ConflictError, InvalidArgumentError, NotFoundError
from codequest_app.core.signals import level_up, xp_awarded
from codequest_app.db_instance import db
from codequest_app.models import User
from ..logics import level_logic
from ..models import ExpTransaction, Level
from ..schemas import UserLevelDTO, XpAwardDTO


def _as_int(value, field, minimum=None):
    if isinstance(value, bool):
        raise InvalidArgumentError(f"'{field}' must be an integer", details={'field': field})
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"'{field}' must be an integer", details={'field': field})
    if number != value and not isinstance(value, str):
        raise InvalidArgumentError(f"'{field}' must be an integer", details={'field': field})
    if minimum is not None and number < minimum:
        raise InvalidArgumentError(f"'{field}' must be >= {minimum}", details={'field': field})
    return number


class LevelService:
    """Level table CRUD plus the XP ledger."""

    @staticmethod
    def compute_level_cost(level):
        try:
            return level_logic.compute_level_cost(level)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc), details={'level': level})

    @staticmethod
    def get_levels():
        return Level.query.order_by(Level.level_number.asc()).all()

    @staticmethod
    def get_level(level_number):
        level = Level.query.filter_by(level_number=level_number).first()
        if level is None:
            raise NotFoundError(f"Level {level_number} not found", resource='level')
        return level

    @staticmethod
    def _check_threshold(level_number, exp_required, exclude_id=None):
        if level_number == 1 and exp_required != 0:
            raise InvalidArgumentError("Level 1 must require 0 XP", details={'exp_required': exp_required})

        below = Level.query.filter(Level.level_number < level_number)
        above = Level.query.filter(Level.level_number > level_number)
        if exclude_id is not None:
            below = below.filter(Level.level_id != exclude_id)
            above = above.filter(Level.level_id != exclude_id)
        previous = below.order_by(Level.level_number.desc()).first()
        following = above.order_by(Level.level_number.asc()).first()

        if not level_logic.is_monotonic(
            previous.exp_required if previous else None,
            exp_required,
            following.exp_required if following else None,
        ):
            raise InvalidArgumentError(
                "exp_required must be non-decreasing in level_number",
                details={
                    'level_number': level_number,
                    'exp_required': exp_required,
                    'previous': previous.exp_required if previous else None,
                    'next': following.exp_required if following else None,
                },
            )

    @staticmethod
    def create_level(data):
        level_number = _as_int(data.get('level_number'), 'level_number', minimum=1)
        name = (data.get('name') or '').strip()
        if not name:
            raise InvalidArgumentError("'name' is required", details={'field': 'name'})
        exp_required = _as_int(data.get('exp_required', 0), 'exp_required', minimum=0)

        if Level.query.filter_by(level_number=level_number).first() is not None:
            raise ConflictError(f"Level {level_number} already exists", code='LEVEL_EXISTS')
        LevelService._check_threshold(level_number, exp_required)

        level = Level(
            level_number=level_number,
            name=name,
            description=data.get('description') or '',
            icon=data.get('icon'),
            exp_required=exp_required,
        )
        db.session.add(level)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(f"Level {level_number} already exists", code='LEVEL_EXISTS')
        current_app.logger.info(f"Created level {level_number} ({name}) at {exp_required} XP")
        return level

    @staticmethod
    def update_level(level_number, data):
        level = LevelService.get_level(level_number)

        if 'name' in data:
            name = (data.get('name') or '').strip()
            if not name:
                raise InvalidArgumentError("'name' cannot be empty", details={'field': 'name'})
            level.name = name
        if 'description' in data:
            level.description = data.get('description') or ''
        if 'icon' in data:
            level.icon = data.get('icon')
        if 'exp_required' in data:
            exp_required = _as_int(data.get('exp_required'), 'exp_required', minimum=0)
            LevelService._check_threshold(level.level_number, exp_required, exclude_id=level.level_id)
            level.exp_required = exp_required

        db.session.commit()
        current_app.logger.info(f"Updated level {level_number}")
        return level

    @staticmethod
    def delete_level(level_number):
        level = LevelService.get_level(level_number)
        if level.level_number == 1:
            raise InvalidArgumentError("Level 1 cannot be deleted", details={'level_number': 1})
        db.session.delete(level)
        db.session.commit()
        current_app.logger.info(f"Deleted level {level_number}")

    @staticmethod
    def resolve_level_for_xp(total_xp, levels=None):
        """Return the Level row reached with ``total_xp`` (None when no levels exist)."""
        if levels is None:
            levels = LevelService.get_levels()
        if not levels:
            return None
        index = level_logic.resolve_level(total_xp, [level.exp_required for level in levels])
        return levels[max(index, 0)]

    @staticmethod
    def add_xp(user_id, amount, description, source_kind=None, source_id=None):
        """
        Add XP to a user, write the ledger row and recompute the level.

        Emits xp_awarded, and level_up when the level increased.
        """
        amount = _as_int(amount, 'amount', minimum=1)

        user = db.session.query(User).filter_by(user_id=user_id).with_for_update().first()
        if user is None:
            raise NotFoundError(f"User {user_id} not found", resource='user')

        old_level = user.current_level or 1
        user.total_xp = (user.total_xp or 0) + amount
        db.session.add(ExpTransaction(
            user_id=user_id,
            amount=amount,
            description=description,
            source_kind=source_kind,
            source_id=source_id,
            created_at=clock.now(),
        ))

        reached = LevelService.resolve_level_for_xp(user.total_xp)
        if reached is not None and reached.level_number > old_level:
            user.current_level = reached.level_number

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.error(f"Failed to add {amount} XP to user {user_id}", exc_info=True)
            raise

        result = XpAwardDTO(
            user_id=user_id,
            amount=amount,
            total_xp=user.total_xp,
            old_level=old_level,
            new_level=user.current_level,
        )
        current_app.logger.info(f"User {user_id} gained {amount} XP ({description}), total {user.total_xp}")

        if result.leveled_up:
            current_app.logger.info(f"User {user_id} leveled up {old_level} -> {result.new_level}")
            level_up.send(
                None,
                user_id=user_id,
                old_level=old_level,
                new_level=result.new_level,
                level=reached,
            )

        xp_awarded.send(
            None,
            user_id=user_id,
            amount=amount,
            new_total=user.total_xp,
            source_kind=source_kind,
            source_id=source_id,
        )
        return result

    @staticmethod
    def get_user_level_info(user_id):
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", resource='user')

        total_xp = user.total_xp or 0
        current_number = user.current_level or 1
        current = Level.query.filter_by(level_number=current_number).first()
        following = Level.query.filter(Level.level_number > current_number)\
            .order_by(Level.level_number.asc()).first()

        floor_xp = current.exp_required if current else level_logic.compute_cumulative_xp(current_number)
        if following is not None:
            span = following.exp_required - floor_xp
            progress = 100.0 if span <= 0 else min(100.0, (total_xp - floor_xp) * 100.0 / span)
            to_next = max(0, following.exp_required - total_xp)
        else:
            progress = 100.0
            to_next = 0

        return UserLevelDTO(
            user_id=user_id,
            total_xp=total_xp,
            current_level=current_number,
            level_name=current.name if current else level_logic.milestone_name(current_number),
            exp_required=floor_xp,
            next_level=following.level_number if following else None,
            next_level_exp=following.exp_required if following else None,
            xp_to_next_level=to_next,
            progress_percent=round(max(0.0, progress), 2),
        )

    @staticmethod
    def get_level_progression(max_level=None):
        """Cost and cumulative XP per level from the growth formula."""
        if max_level is None:
            max_level = current_app.config.get('LEVEL_MAX', 100)
        max_level = _as_int(max_level, 'max_level', minimum=1)
        return [
            {
                'level_number': level,
                'cost': level_logic.compute_level_cost(level),
                'exp_required': level_logic.compute_cumulative_xp(level),
            }
            for level in range(1, max_level + 1)
        ]

    @staticmethod
    def get_xp_history(user_id, page=1, per_page=20):
        pagination = ExpTransaction.query.filter_by(user_id=user_id)\
            .order_by(ExpTransaction.created_at.desc(), ExpTransaction.id.desc())\
            .paginate(page=page, per_page=per_page, error_out=False)
        return pagination.items, pagination.total

    @staticmethod
    def seed_levels(max_level=None, milestones=None):
        """
        Write the level table computed from the growth formula.

        Existing rows are updated in place so the script can be re-run.
        Returns the number of rows written.
        """
        if max_level is None:
            max_level = current_app.config.get('LEVEL_MAX', 100)
        rows = level_logic.build_level_table(max_level, milestones)

        existing = {level.level_number: level for level in Level.query.all()}
        for row in rows:
            level = existing.get(row['level_number'])
            if level is None:
                db.session.add(Level(**row))
            else:
                level.name = row['name']
                level.description = row['description']
                level.exp_required = row['exp_required']

        db.session.commit()
        current_app.logger.info(f"Seeded {len(rows)} levels")
        return len(rows)
