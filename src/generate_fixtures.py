import argparse
import os
import sys
from datetime import date

import yaml

from league.errors import ValidationError
from league.ids import new_id
from league.models import Team
from league.schedule import generate_round_robin


def load_teams(file_path):
    """
    Load teams from a YAML list. Entries are team names or mappings with
    a ``name`` (and optional ``logo``).
    """
    teams = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if not isinstance(data, list):
        raise ValidationError(f'{file_path} must contain a list of teams')
    for entry in data:
        if isinstance(entry, dict):
            name = str(entry.get('name', '')).strip()
            logo = entry.get('logo', '')
        else:
            name = str(entry).strip()
            logo = ''
        if name:
            teams.append(Team(id=new_id(), name=name, logo=logo))
    return teams


def format_fixtures(teams, matches):
    names = {team.id: team.name for team in teams}
    lines = []
    current_day = None
    for match in matches:
        day, kickoff = match.datetime.split('T')
        if day != current_day:
            if current_day is not None:
                lines.append('')
            lines.append(f'# {day}')
            current_day = day
        lines.append(f'{kickoff[:5]}  {names[match.home_id]} vs {names[match.away_id]}')
    return lines


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Print a round-robin fixture list')
    parser.add_argument('teams_file', nargs='?', default=os.path.join(base_dir, 'data', 'teams.yaml'),
                        help='YAML list of team names')
    parser.add_argument('--date', default=date.today().isoformat(), help='Competition date (YYYY-MM-DD)')
    parser.add_argument('--kickoff', default='19:00', help='First kickoff (HH:MM)')
    parser.add_argument('--duration', type=int, default=10, help='Match duration in minutes')
    parser.add_argument('--break', dest='break_minutes', type=int, default=2, help='Break between matches in minutes')
    args = parser.parse_args(argv)

    try:
        teams = load_teams(args.teams_file)
        matches = generate_round_robin(teams, args.date, args.kickoff, args.duration, args.break_minutes)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for line in format_fixtures(teams, matches):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
