"""
Round-robin fixture generation and fixture edits.
"""
import datetime
import logging
from itertools import combinations
from typing import List, Optional, Tuple

from league.errors import ValidationError
from league.ids import new_id
from league.models import Match, Team, parse_score, resolve_teams, teams_by_id

logger = logging.getLogger(__name__)

DATETIME_FORMAT = '%Y-%m-%dT%H:%M:%S'
SCORE_SIDES = ('home', 'away')


def _parse_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'Invalid date "{value}", expected YYYY-MM-DD')


def _parse_time(value) -> datetime.time:
    if isinstance(value, datetime.time):
        return value
    text = str(value).strip()
    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            return datetime.datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f'Invalid time "{value}", expected HH:MM')


def to_whole_number(value, field: str) -> int:
    """Parse an int setting. Fractions and booleans are rejected, never truncated."""
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a whole number')
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f'{field} must be a whole number')
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a whole number')


def generate_round_robin(teams: List[Team], start_date, kickoff, match_duration_minutes,
                         break_minutes, id_factory=new_id, max_teams: Optional[int] = None) -> List[Match]:
    """
    Build a single round-robin: every team meets every other team once.

    Pairs are enumerated in team input order (0v1, 0v2, ..., 1v2, ...) and
    take consecutive time slots: the first pair kicks off at
    ``start_date + kickoff`` and each following pair starts
    ``match_duration_minutes + break_minutes`` after the previous one.
    A team can end up playing back to back; slots are not optimised.

    Raises ValidationError before generating anything when there are fewer
    than two teams, more than ``max_teams``, or the timing is invalid.
    """
    if len(teams) < 2:
        raise ValidationError('At least 2 teams are needed to generate matches')
    if max_teams is not None and len(teams) > max_teams:
        raise ValidationError(f'At most {max_teams} teams can be scheduled')

    duration = to_whole_number(match_duration_minutes, 'Match duration')
    rest = to_whole_number(break_minutes, 'Break')
    if duration <= 0:
        raise ValidationError('Match duration must be greater than 0')
    if rest < 0:
        raise ValidationError('Break cannot be negative')

    slot = datetime.datetime.combine(_parse_date(start_date), _parse_time(kickoff))
    step = datetime.timedelta(minutes=duration + rest)

    matches = []
    for home, away in combinations(teams, 2):
        matches.append(Match(
            id=id_factory(),
            home_id=home.id,
            away_id=away.id,
            datetime=slot.strftime(DATETIME_FORMAT),
            home_score=0,
            away_score=0,
        ))
        slot += step

    logger.info('Generated %d matches for %d teams', len(matches), len(teams))
    return matches


def _find_match(matches, match_id):
    for match in matches:
        if match.id == match_id:
            return match
    raise ValidationError(f'Match "{match_id}" not found')


def set_score(match, side: str, value):
    if side not in SCORE_SIDES:
        raise ValidationError(f'Invalid side "{side}", expected home or away')
    setattr(match, f'{side}_score', parse_score(value))
    return match


def record_score(matches: List[Match], match_id: str, side: str, value) -> Match:
    """Set the home or away score of one match."""
    return set_score(_find_match(matches, match_id), side, value)


def reschedule_match(matches: List[Match], match_id: str, date, time) -> Match:
    """Move a match to a new date and kickoff time."""
    match = _find_match(matches, match_id)
    kickoff = datetime.datetime.combine(_parse_date(date), _parse_time(time))
    match.datetime = kickoff.strftime(DATETIME_FORMAT)
    return match


def resolve_fixtures(teams: List[Team], matches: List[Match]) -> List[Tuple[Match, Team, Team]]:
    """Fixtures with both teams looked up. Matches with a deleted team are left out."""
    index = teams_by_id(teams)
    fixtures = []
    for match in matches:
        pair = resolve_teams(index, match.home_id, match.away_id)
        if pair is None:
            continue
        fixtures.append((match, pair[0], pair[1]))
    return fixtures
