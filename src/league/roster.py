"""
Team and player roster edits.

Teams are a list; players are grouped by owning team id. Every player has
its own id so an edit or delete never depends on list positions.
"""
from typing import Dict, List, Optional

from league.errors import ValidationError
from league.ids import new_id
from league.models import Player, Team


def _clean_name(name, what):
    name = (name or '').strip()
    if not name:
        raise ValidationError(f'{what} name is required')
    return name


def _find_team(teams, team_id):
    for team in teams:
        if team.id == team_id:
            return team
    raise ValidationError(f'Team "{team_id}" not found')


def add_team(teams: List[Team], name: str, logo: str = '', id_factory=new_id) -> Team:
    team = Team(id=id_factory(), name=_clean_name(name, 'Team'), logo=logo)
    teams.append(team)
    return team


def update_team(teams: List[Team], team_id: str, name: str, logo: Optional[str] = None) -> Team:
    """Rename a team. The logo is only replaced when a new one is given."""
    team = _find_team(teams, team_id)
    team.name = _clean_name(name, 'Team')
    if logo is not None:
        team.logo = logo
    return team


def delete_team(teams: List[Team], team_id: str) -> List[Team]:
    """
    Remove a team. Matches, bracket nodes and players that point at it are
    left alone and show up as referential gaps.
    """
    _find_team(teams, team_id)
    return [team for team in teams if team.id != team_id]


def _clean_number(number):
    """Shirt number: blank means none, anything else must be a non-negative whole number."""
    if number is None or (isinstance(number, str) and number.strip() == ''):
        return None
    if isinstance(number, bool):
        raise ValidationError(f'Invalid shirt number "{number}"')
    try:
        value = int(str(number).strip())
    except ValueError:
        raise ValidationError(f'Invalid shirt number "{number}"')
    if value < 0:
        raise ValidationError(f'Invalid shirt number "{number}"')
    return value


def _find_player(players, team_id, player_id):
    if not player_id:
        raise ValidationError('Player id is required')
    for player in players.get(team_id, []):
        if player.id == player_id:
            return player
    raise ValidationError(f'Player "{player_id}" not found in team "{team_id}"')


def add_player(players: Dict[str, List[Player]], team_id: str, name: str, number=None,
               position=None, photo: str = '', id_factory=new_id) -> Player:
    if not team_id:
        raise ValidationError('Select a team for the player')
    player = Player(id=id_factory(), name=_clean_name(name, 'Player'),
                    number=_clean_number(number), position=position, photo=photo)
    players.setdefault(team_id, []).append(player)
    return player


def update_player(players: Dict[str, List[Player]], team_id: str, player_id: str, name: str,
                  number=None, position=None, photo: Optional[str] = None) -> Player:
    """Edit a player in place. The photo is only replaced when a new one is given."""
    player = _find_player(players, team_id, player_id)
    updated = Player(id=player.id, name=_clean_name(name, 'Player'), number=_clean_number(number),
                     position=position, photo=player.photo if photo is None else photo)
    player.name = updated.name
    player.number = updated.number
    player.position = updated.position
    player.photo = updated.photo
    return player


def delete_player(players: Dict[str, List[Player]], team_id: str, player_id: str) -> None:
    """Remove a player. A team left with no players loses its group."""
    _find_player(players, team_id, player_id)
    remaining = [p for p in players[team_id] if p.id != player_id]
    if remaining:
        players[team_id] = remaining
    else:
        del players[team_id]


def count_players(players: Dict[str, list]) -> int:
    return sum(len(group) for group in players.values() if isinstance(group, list))
