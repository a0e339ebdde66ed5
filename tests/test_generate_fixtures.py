"""
Tests for the command line fixture generator.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from generate_fixtures import load_teams, format_fixtures, main
from league.errors import ValidationError
from league.schedule import generate_round_robin


@pytest.fixture
def teams_file(tmp_path):
    path = tmp_path / "teams.yaml"
    path.write_text("- Lions\n- name: Tigers\n  logo: tigers.png\n- Bears\n- ''\n", encoding='utf-8')
    return str(path)


class TestLoadTeams:

    def test_names_and_mappings(self, teams_file):
        teams = load_teams(teams_file)
        assert [t.name for t in teams] == ['Lions', 'Tigers', 'Bears']
        assert teams[1].logo == 'tigers.png'
        assert len({t.id for t in teams}) == 3

    def test_empty_file(self, tmp_path):
        path = tmp_path / "teams.yaml"
        path.write_text("", encoding='utf-8')
        assert load_teams(str(path)) == []

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "teams.yaml"
        path.write_text("teams: 3\n", encoding='utf-8')
        with pytest.raises(ValidationError):
            load_teams(str(path))


class TestFormatFixtures:

    def test_groups_by_day(self, sample_teams, sequential_ids):
        matches = generate_round_robin(sample_teams[:3], '2025-12-15', '23:30', 20, 5, id_factory=sequential_ids)
        assert format_fixtures(sample_teams, matches) == [
            '# 2025-12-15',
            '23:30  Lions vs Tigers',
            '23:55  Lions vs Bears',
            '',
            '# 2025-12-16',
            '00:20  Tigers vs Bears',
        ]


class TestMain:

    def test_prints_fixtures(self, teams_file, capsys):
        code = main([teams_file, '--date', '2025-12-15', '--kickoff', '18:00', '--duration', '15', '--break', '0'])
        assert code == 0
        out = capsys.readouterr().out.splitlines()
        assert out == [
            '# 2025-12-15',
            '18:00  Lions vs Tigers',
            '18:15  Lions vs Bears',
            '18:30  Tigers vs Bears',
        ]

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.yaml")]) == 1
        assert capsys.readouterr().err.startswith('Error:')

    def test_too_few_teams(self, tmp_path, capsys):
        path = tmp_path / "teams.yaml"
        path.write_text("- Lions\n", encoding='utf-8')
        assert main([str(path), '--date', '2025-12-15']) == 1
        assert 'At least 2 teams' in capsys.readouterr().err

    def test_invalid_kickoff(self, teams_file, capsys):
        assert main([teams_file, '--kickoff', 'noon']) == 1
        assert 'Invalid time' in capsys.readouterr().err
