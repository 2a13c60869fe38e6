"""
Tests for the XP progression curve (pure logic, no database).
"""

import pytest

from codequest_app.modules.progression.logics.level_logic import (
    MILESTONES,
    build_level_table,
    compute_cumulative_xp,
    compute_level_cost,
    is_monotonic,
    milestone_name,
    resolve_level,
)


class LevelCostTests:

    def test_known_costs(self):
        assert [compute_level_cost(level) for level in range(1, 6)] == [100, 283, 520, 800, 1118]

    @pytest.mark.parametrize('bad', [0, -3])
    def test_level_below_one_rejected(self, bad):
        with pytest.raises(ValueError):
            compute_level_cost(bad)

    def test_cost_grows(self):
        costs = [compute_level_cost(level) for level in range(1, 50)]
        assert costs == sorted(costs)


class CumulativeXpTests:

    def test_level_one_and_below_need_nothing(self):
        assert compute_cumulative_xp(1) == 0
        assert compute_cumulative_xp(0) == 0

    def test_level_six_requires_2821(self):
        assert compute_cumulative_xp(6) == 2821

    def test_difference_equals_cost(self):
        for level in range(1, 120):
            assert compute_cumulative_xp(level + 1) - compute_cumulative_xp(level) == compute_level_cost(level)


class ResolveLevelTests:

    def setup_method(self):
        self.thresholds = [compute_cumulative_xp(level) for level in range(1, 21)]

    def test_boundaries_are_exact(self):
        for index, threshold in enumerate(self.thresholds):
            assert resolve_level(threshold, self.thresholds) == index
            if threshold > 0:
                assert resolve_level(threshold - 1, self.thresholds) == index - 1

    def test_above_every_threshold_returns_last(self):
        assert resolve_level(10 ** 9, self.thresholds) == len(self.thresholds) - 1

    def test_matches_linear_scan(self):
        for xp in range(0, 6000, 37):
            expected = max(i for i, t in enumerate(self.thresholds) if t <= xp)
            assert resolve_level(xp, self.thresholds) == expected


class LevelTableTests:

    def test_table_shape(self):
        rows = build_level_table(100)
        assert len(rows) == 100
        assert rows[0]['level_number'] == 1
        assert rows[0]['exp_required'] == 0
        assert rows[5]['exp_required'] == 2821

    def test_thresholds_non_decreasing(self):
        rows = build_level_table(100)
        values = [row['exp_required'] for row in rows]
        assert values == sorted(values)

    def test_milestone_names(self):
        rows = {row['level_number']: row for row in build_level_table(100)}
        assert rows[1]['name'] == 'Code Squire'
        assert rows[4]['name'] == 'Code Squire'
        assert rows[5]['name'] == 'Debug Apprentice'
        assert rows[100]['name'] == 'Grand CodeMaster'
        for number, name in MILESTONES.items():
            assert rows[number]['name'] == name

    def test_milestone_name_without_milestone(self):
        assert milestone_name(3, {5: 'Five'}) == 'Level 3'

    def test_invalid_max_level(self):
        with pytest.raises(ValueError):
            build_level_table(0)


def test_is_monotonic():
    assert is_monotonic(100, 150, 200)
    assert is_monotonic(None, 0, 100)
    assert not is_monotonic(100, 99, None)
    assert not is_monotonic(None, 300, 200)
