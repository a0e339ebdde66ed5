"""
Unit tests for round-robin fixture generation and fixture edits.
"""
import pytest
import sys
import os
from datetime import date, datetime, time, timedelta

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.errors import ValidationError
from league.models import Team
from league.schedule import (generate_round_robin, record_score, reschedule_match,
                             resolve_fixtures, parse_score)


def _teams(n):
    return [Team(id=f"t{i}", name=f"Team {i}") for i in range(n)]


class TestGenerateRoundRobin:
    """Tests for generate_round_robin."""

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 8, 16])
    def test_match_count(self, n):
        matches = generate_round_robin(_teams(n), '2025-12-15', '19:00', 10, 2)
        assert len(matches) == n * (n - 1) // 2

    @pytest.mark.parametrize("n", [2, 5, 8])
    def test_every_pair_exactly_once(self, n):
        matches = generate_round_robin(_teams(n), '2025-12-15', '19:00', 10, 2)
        pairs = [frozenset((m.home_id, m.away_id)) for m in matches]
        assert len(set(pairs)) == len(pairs)
        assert all(len(p) == 2 for p in pairs)

    def test_pairs_in_enumeration_order(self):
        matches = generate_round_robin(_teams(4), '2025-12-15', '19:00', 10, 2)
        assert [(m.home_id, m.away_id) for m in matches] == [
            ('t0', 't1'), ('t0', 't2'), ('t0', 't3'),
            ('t1', 't2'), ('t1', 't3'), ('t2', 't3'),
        ]

    def test_kickoffs_spaced_by_duration_and_break(self):
        matches = generate_round_robin(_teams(5), '2025-12-15', '19:00', 10, 2)
        kickoffs = [datetime.fromisoformat(m.datetime) for m in matches]
        assert kickoffs[0] == datetime(2025, 12, 15, 19, 0)
        for earlier, later in zip(kickoffs, kickoffs[1:]):
            assert later - earlier == timedelta(minutes=12)

    def test_zero_break(self):
        matches = generate_round_robin(_teams(3), '2025-12-15', '19:00', 15, 0)
        assert [m.datetime for m in matches] == [
            '2025-12-15T19:00:00', '2025-12-15T19:15:00', '2025-12-15T19:30:00',
        ]

    def test_rolls_over_midnight(self):
        matches = generate_round_robin(_teams(3), '2025-12-15', '23:30', 20, 5)
        assert matches[-1].datetime == '2025-12-16T00:20:00'

    def test_accepts_date_and_time_objects(self):
        matches = generate_round_robin(_teams(2), date(2026, 1, 2), time(9, 30), 10, 2)
        assert matches[0].datetime == '2026-01-02T09:30:00'

    def test_scores_start_at_zero(self):
        matches = generate_round_robin(_teams(3), '2025-12-15', '19:00', 10, 2)
        assert all(m.home_score == 0 and m.away_score == 0 for m in matches)

    def test_uses_id_factory(self, sequential_ids):
        matches = generate_round_robin(_teams(3), '2025-12-15', '19:00', 10, 2, id_factory=sequential_ids)
        assert [m.id for m in matches] == ['id1', 'id2', 'id3']

    def test_default_ids_are_unique(self):
        matches = generate_round_robin(_teams(6), '2025-12-15', '19:00', 10, 2)
        assert len({m.id for m in matches}) == len(matches)

    @pytest.mark.parametrize("n", [0, 1])
    def test_fewer_than_two_teams(self, n):
        with pytest.raises(ValidationError):
            generate_round_robin(_teams(n), '2025-12-15', '19:00', 10, 2)

    def test_max_teams(self):
        with pytest.raises(ValidationError, match="At most 8"):
            generate_round_robin(_teams(9), '2025-12-15', '19:00', 10, 2, max_teams=8)

    @pytest.mark.parametrize("duration,rest", [(0, 2), (-5, 2), (10, -1), ("ten", 2), (10.9, 2), (10, 0.5), (True, 2)])
    def test_invalid_timing(self, duration, rest):
        with pytest.raises(ValidationError):
            generate_round_robin(_teams(3), '2025-12-15', '19:00', duration, rest)

    @pytest.mark.parametrize("duration,rest", [(15.0, 0), ("15", "0"), (" 15 ", 0)])
    def test_whole_number_timing_accepted(self, duration, rest):
        matches = generate_round_robin(_teams(3), '2025-12-15', '19:00', duration, rest)
        assert matches[1].datetime == '2025-12-15T19:15:00'

    def test_fractional_duration_not_truncated(self):
        with pytest.raises(ValidationError, match="whole number"):
            generate_round_robin(_teams(3), '2025-12-15', '19:00', 10.9, 2)

    def test_invalid_date(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            generate_round_robin(_teams(3), '15/12/2025', '19:00', 10, 2)

    def test_invalid_kickoff(self):
        with pytest.raises(ValidationError, match="Invalid time"):
            generate_round_robin(_teams(3), '2025-12-15', '7pm', 10, 2)


class TestScoresAndReschedule:
    """Tests for fixture edits."""

    def _matches(self):
        return generate_round_robin(_teams(3), '2025-12-15', '19:00', 10, 2)

    def test_record_home_score(self):
        matches = self._matches()
        match = record_score(matches, matches[0].id, 'home', '3')
        assert match.home_score == 3
        assert matches[0].home_score == 3

    def test_record_away_score(self):
        matches = self._matches()
        record_score(matches, matches[1].id, 'away', 2)
        assert matches[1].away_score == 2

    @pytest.mark.parametrize("raw,expected", [('', 0), (None, 0), ('abc', 0), ('-4', 0), ('7', 7)])
    def test_parse_score(self, raw, expected):
        assert parse_score(raw) == expected

    def test_unknown_match(self):
        with pytest.raises(ValidationError, match="not found"):
            record_score(self._matches(), 'nope', 'home', 1)

    def test_unknown_side(self):
        matches = self._matches()
        with pytest.raises(ValidationError, match="Invalid side"):
            record_score(matches, matches[0].id, 'middle', 1)

    def test_reschedule(self):
        matches = self._matches()
        match = reschedule_match(matches, matches[2].id, '2025-12-20', '18:45')
        assert match.datetime == '2025-12-20T18:45:00'

    def test_reschedule_invalid_time(self):
        matches = self._matches()
        with pytest.raises(ValidationError):
            reschedule_match(matches, matches[0].id, '2025-12-20', '25:99')


class TestResolveFixtures:

    def test_skips_deleted_teams(self):
        teams = _teams(3)
        matches = generate_round_robin(teams, '2025-12-15', '19:00', 10, 2)
        remaining = [t for t in teams if t.id != 't1']
        fixtures = resolve_fixtures(remaining, matches)
        assert [(m.home_id, m.away_id) for m, _, _ in fixtures] == [('t0', 't2')]
        _, home, away = fixtures[0]
        assert home.name == 'Team 0'
        assert away.name == 'Team 2'
