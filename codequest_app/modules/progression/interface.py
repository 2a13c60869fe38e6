"""Public API of the progression module, used by other modules."""
from typing import Optional

from .schemas import UserLevelDTO, XpAwardDTO
from .services.level_service import LevelService


def award_xp(user_id: int, amount: int, description: str,
             source_kind: Optional[str] = None, source_id: Optional[int] = None) -> XpAwardDTO:
    return LevelService.add_xp(user_id, amount, description, source_kind, source_id)


def get_user_level(user_id: int) -> UserLevelDTO:
    return LevelService.get_user_level_info(user_id)
