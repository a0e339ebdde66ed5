import logging

logger = logging.getLogger(__name__)


def parse_score(value) -> int:
    """Coerce a score to a non-negative int. Blank or junk input counts as 0."""
    if isinstance(value, bool):
        return 0
    try:
        score = int(value)
    except (TypeError, ValueError):
        return 0
    return max(score, 0)


def _optional_int(value):
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class Team:
    def __init__(self, id, name, logo=''):
        self.id = id
        self.name = name
        self.logo = logo or ''

    @classmethod
    def from_dict(cls, data):
        return cls(id=data.get('id'), name=data.get('name', ''), logo=data.get('logo', ''))

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'logo': self.logo}

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name})"


class Player:
    def __init__(self, id, name, number=None, position=None, photo=''):
        self.id = id
        self.name = name
        self.number = _optional_int(number)
        self.position = position or None
        self.photo = photo or ''

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            number=data.get('number'),
            position=data.get('position'),
            photo=data.get('photo', ''),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'number': self.number,
            'position': self.position,
            'photo': self.photo,
        }

    def __repr__(self):
        return f"Player(id={self.id}, name={self.name}, number={self.number})"


class Match:
    def __init__(self, id, home_id, away_id, datetime=None, home_score=0, away_score=0):
        self.id = id
        self.home_id = home_id
        self.away_id = away_id
        self.datetime = datetime  # ISO-8601 local timestamp, e.g. 2025-12-15T19:00:00
        self.home_score = parse_score(home_score)
        self.away_score = parse_score(away_score)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            home_id=data.get('homeId'),
            away_id=data.get('awayId'),
            datetime=data.get('datetime'),
            home_score=data.get('homeScore', 0),
            away_score=data.get('awayScore', 0),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'homeId': self.home_id,
            'awayId': self.away_id,
            'datetime': self.datetime,
            'homeScore': self.home_score,
            'awayScore': self.away_score,
        }

    def __repr__(self):
        return (f"Match(id={self.id}, {self.home_id} {self.home_score}-{self.away_score} "
                f"{self.away_id}, datetime={self.datetime})")


class BracketNode(Match):
    """A knockout match. Team ids stay None until the feeding round is decided."""

    def __init__(self, id, home_id=None, away_id=None, home_score=0, away_score=0):
        super().__init__(id, home_id, away_id, home_score=home_score, away_score=away_score)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            home_id=data.get('homeId'),
            away_id=data.get('awayId'),
            home_score=data.get('homeScore', 0),
            away_score=data.get('awayScore', 0),
        )

    def to_dict(self):
        data = super().to_dict()
        del data['datetime']
        return data

    def __repr__(self):
        return f"BracketNode(id={self.id}, {self.home_id} {self.home_score}-{self.away_score} {self.away_id})"


class Bracket:
    def __init__(self, rounds=None):
        self.rounds = rounds if rounds else []

    @classmethod
    def empty(cls):
        return cls(rounds=[])

    @classmethod
    def from_dict(cls, data):
        rounds = (data or {}).get('rounds', [])
        return cls(rounds=[[BracketNode.from_dict(node) for node in round_nodes] for round_nodes in rounds])

    def to_dict(self):
        return {'rounds': [[node.to_dict() for node in round_nodes] for round_nodes in self.rounds]}

    def find_node(self, node_id):
        for round_nodes in self.rounds:
            for node in round_nodes:
                if node.id == node_id:
                    return node
        return None

    def __repr__(self):
        return f"Bracket(rounds={[len(r) for r in self.rounds]})"


class StandingsRow:
    def __init__(self, team_id):
        self.team_id = team_id
        self.matches_played = 0
        self.wins = 0
        self.draws = 0
        self.losses = 0
        self.goals_for = 0
        self.goals_against = 0
        self.goal_difference = 0
        self.points = 0

    def to_dict(self):
        return {
            'team_id': self.team_id,
            'matches_played': self.matches_played,
            'wins': self.wins,
            'draws': self.draws,
            'losses': self.losses,
            'goals_for': self.goals_for,
            'goals_against': self.goals_against,
            'goal_difference': self.goal_difference,
            'points': self.points,
        }

    def __repr__(self):
        return f"StandingsRow(team_id={self.team_id}, points={self.points}, goal_difference={self.goal_difference})"


def teams_by_id(teams):
    return {team.id: team for team in teams}


def resolve_teams(index, home_id, away_id):
    """
    Look up both sides of a match in a ``teams_by_id`` index.

    Teams can be deleted while matches and bracket nodes still point at them.
    Such a referential gap is tolerated everywhere: this returns None and the
    caller skips the match (standings, fixture lists) or shows a placeholder
    (bracket display).
    """
    home = index.get(home_id)
    away = index.get(away_id)
    if home is None or away is None:
        logger.debug('Referential gap: %s vs %s does not resolve', home_id, away_id)
        return None
    return home, away
