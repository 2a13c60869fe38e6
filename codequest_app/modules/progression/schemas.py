from dataclasses import asdict, dataclass
from typing import Optional


@dataclass
class UserLevelDTO:
    user_id: int
    total_xp: int
    current_level: int
    level_name: str
    exp_required: int
    next_level: Optional[int]
    next_level_exp: Optional[int]
    xp_to_next_level: int
    progress_percent: float

    def to_dict(self):
        return asdict(self)


@dataclass
class XpAwardDTO:
    user_id: int
    amount: int
    total_xp: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level

    def to_dict(self):
        data = asdict(self)
        data['leveled_up'] = self.leveled_up
        return data
