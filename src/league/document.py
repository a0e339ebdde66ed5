"""
The persisted tournament document.

Shape::

    {"teams": [...], "players": {teamId: [...]}, "matches": [...],
     "bracket": {"rounds": [[...], ...]}}

The same document is used for file export/import and for the remote mirror.
"""
import json
import logging
from typing import Dict

from league.errors import DocumentImportError
from league.ids import new_id
from league.store import SLICE_KEYS, EntityStore

logger = logging.getLogger(__name__)


def build_document(store: EntityStore) -> Dict:
    return store.snapshot()


def validate_document(data, max_teams: int) -> None:
    """Raise DocumentImportError unless ``data`` is an importable document."""
    if not isinstance(data, dict):
        raise DocumentImportError('Backup must be a JSON object')
    if 'teams' not in data:
        raise DocumentImportError('Backup has no "teams" list')
    teams = data['teams']
    if not isinstance(teams, list):
        raise DocumentImportError('"teams" must be a list')
    if len(teams) > max_teams:
        raise DocumentImportError(f'Backup has {len(teams)} teams, the limit is {max_teams}')
    for team in teams:
        if not isinstance(team, dict):
            raise DocumentImportError('Every team must be an object')
        if not _is_id(team.get('id')):
            raise DocumentImportError('Every team needs a string "id"')

    players = data.get('players')
    if players is not None:
        if not isinstance(players, dict):
            raise DocumentImportError('"players" must be an object keyed by team id')
        for team_id, group in players.items():
            if not isinstance(group, list) or any(not isinstance(p, dict) for p in group):
                raise DocumentImportError(f'Players of team "{team_id}" must be a list of objects')
            for player in group:
                if player.get('id') is not None and not _is_id(player['id']):
                    raise DocumentImportError(f'Player ids of team "{team_id}" must be strings')

    matches = data.get('matches')
    if matches is not None:
        if not isinstance(matches, list):
            raise DocumentImportError('"matches" must be a list')
        for match in matches:
            _check_match(match, 'match')

    bracket = data.get('bracket')
    if bracket is not None:
        if not isinstance(bracket, dict) or not isinstance(bracket.get('rounds', []), list):
            raise DocumentImportError('"bracket" must be an object with a "rounds" list')
        for round_nodes in bracket.get('rounds', []):
            if not isinstance(round_nodes, list):
                raise DocumentImportError('Every bracket round must be a list')
            for node in round_nodes:
                _check_match(node, 'bracket match')


def _is_id(value) -> bool:
    return isinstance(value, str) and value != ''


def _is_score(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _check_match(match, what):
    if not isinstance(match, dict):
        raise DocumentImportError(f'Every {what} must be an object')
    if not _is_id(match.get('id')):
        raise DocumentImportError(f'Every {what} needs a string "id"')
    for key in ('homeScore', 'awayScore'):
        if key in match and not _is_score(match[key]):
            raise DocumentImportError(f'{what.capitalize()} "{match["id"]}" has an invalid {key}')


def _with_player_ids(players):
    """Copy of the players slice where every player has an id."""
    if not players:
        return players
    return {
        team_id: [player if player.get('id') else {**player, 'id': new_id()} for player in group]
        for team_id, group in players.items()
    }


def import_document(store: EntityStore, data, max_teams: int) -> None:
    """Replace the whole store with ``data``. Nothing is written if validation fails."""
    validate_document(data, max_teams)
    snapshot = {key: data.get(key) for key in SLICE_KEYS}
    snapshot['players'] = _with_player_ids(snapshot['players'])
    store.replace_all(snapshot)
    logger.info('Imported document with %d teams', len(data['teams']))


def dumps(document: Dict) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def loads(text) -> Dict:
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError:
            raise DocumentImportError('Backup is not UTF-8 text')
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentImportError(f'Backup is not valid JSON: {e}')
