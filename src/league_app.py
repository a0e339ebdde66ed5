"""
Flask web application for League Manager.
"""
import base64
import io
import mimetypes
import os
from datetime import date, datetime

import yaml
from flask import Flask, jsonify, request, send_file

from league import document
from league.elimination import (bracket_state, get_bracket_display, record_bracket_score,
                                seed_bracket_from_standings)
from league.errors import DocumentImportError, RemoteSyncError, ValidationError
from league.models import Bracket, Match, Player, Team, teams_by_id
from league.roster import add_player, add_team, count_players, delete_player, delete_team, update_player, update_team
from league.schedule import generate_round_robin, record_score, reschedule_match, resolve_fixtures, to_whole_number
from league.standings import compute_standings
from league.store import EntityStore
from league.sync import SyncAdapter, SyncConfig

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

SETTINGS_FILE_NAME = 'settings.yaml'
SYNC_FILE_NAME = 'sync.yaml'
ALLOWED_IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp'}
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MB


def _file_path(filename: str) -> str:
    return os.path.join(DATA_DIR, filename)


def _log_change(key, value):
    app.logger.debug(f'State changed: {key}')


def get_store() -> EntityStore:
    """Open the entity store for the current data directory."""
    store = EntityStore(DATA_DIR)
    store.subscribe(_log_change)
    return store


def get_default_settings():
    """Default competition settings."""
    return {
        'competition_date': None,
        'kickoff_time': '19:00',
        'match_duration_minutes': 10,
        'break_minutes': 2,
        'max_teams': 16,
        'bracket_max_slots': 16,
    }


def load_settings():
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    path = _file_path(SETTINGS_FILE_NAME)
    if not os.path.exists(path):
        return defaults
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
        if not data:
            return defaults
        return {**defaults, **data}


def save_settings(settings):
    """Save settings to YAML file."""
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(_file_path(SETTINGS_FILE_NAME), 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)


def load_sync_config():
    return SyncConfig.load(_file_path(SYNC_FILE_NAME))


def load_teams(store):
    return [Team.from_dict(t) for t in store.get('teams')]


def save_teams(store, teams):
    store.set('teams', [t.to_dict() for t in teams])


def load_players(store):
    return {team_id: [Player.from_dict(p) for p in group]
            for team_id, group in store.get('players').items()}


def save_players(store, players):
    store.set('players', {team_id: [p.to_dict() for p in group] for team_id, group in players.items()})


def load_matches(store):
    return [Match.from_dict(m) for m in store.get('matches')]


def save_matches(store, matches):
    store.set('matches', [m.to_dict() for m in matches])


def load_bracket(store):
    return Bracket.from_dict(store.get('bracket'))


def save_bracket(store, bracket):
    store.set('bracket', bracket.to_dict())


def _params():
    """Request parameters from a JSON body or form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def _param(data, name, default=None):
    value = data.get(name)
    if value is None or (isinstance(value, str) and value.strip() == ''):
        return default
    return value


def file_to_data_url(file) -> str:
    """Encode an uploaded image as a data URL. Returns '' when no file was sent."""
    if not file or not file.filename:
        return ''
    ext = os.path.splitext(file.filename)[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(f'Invalid file type. Allowed: {", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))}')
    content = file.read()
    if len(content) > MAX_UPLOAD_SIZE:
        raise ValidationError('Image is too large')
    mimetype = file.mimetype or mimetypes.guess_type(file.filename)[0] or 'application/octet-stream'
    return f'data:{mimetype};base64,{base64.b64encode(content).decode("ascii")}'


def _uploaded_image(data, field):
    """Image from a file upload or a data URL field; None when neither was sent."""
    if field in request.files and request.files[field].filename:
        return file_to_data_url(request.files[field])
    return data.get(field)


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({'success': False, 'error': str(e)}), 400


@app.errorhandler(DocumentImportError)
def handle_import_error(e):
    app.logger.warning(f'Import rejected: {e}')
    return jsonify({'success': False, 'error': str(e)}), 400


@app.errorhandler(RemoteSyncError)
def handle_sync_error(e):
    app.logger.warning(f'Remote sync failed: {e}')
    return jsonify({'success': False, 'error': str(e)}), 502


@app.route('/')
def index():
    """Dashboard statistics."""
    store = get_store()
    return jsonify({
        'teams': len(store.get('teams')),
        'players': count_players(store.get('players')),
        'matches': len(store.get('matches')),
        'bracket_state': bracket_state(load_bracket(store)),
    })


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

@app.route('/api/teams', methods=['GET', 'POST'])
def api_teams():
    store = get_store()
    teams = load_teams(store)
    if request.method == 'POST':
        data = _params()
        logo = _uploaded_image(data, 'logo') or ''
        team = add_team(teams, data.get('name'), logo=logo)
        save_teams(store, teams)
        return jsonify({'success': True, 'team': team.to_dict()})
    return jsonify({'teams': [t.to_dict() for t in teams]})


@app.route('/api/teams/edit', methods=['POST'])
def api_edit_team():
    data = _params()
    store = get_store()
    teams = load_teams(store)
    team = update_team(teams, data.get('id'), data.get('name'), logo=_uploaded_image(data, 'logo'))
    save_teams(store, teams)
    return jsonify({'success': True, 'team': team.to_dict()})


@app.route('/api/teams/delete', methods=['POST'])
def api_delete_team():
    data = _params()
    store = get_store()
    teams = delete_team(load_teams(store), data.get('id'))
    save_teams(store, teams)
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------

@app.route('/api/players', methods=['GET', 'POST'])
def api_players():
    store = get_store()
    players = load_players(store)
    if request.method == 'POST':
        data = _params()
        team_id = data.get('team_id')
        if team_id and team_id not in teams_by_id(load_teams(store)):
            raise ValidationError(f'Team "{team_id}" not found')
        player = add_player(players, team_id, data.get('name'), number=data.get('number'),
                            position=data.get('position'), photo=_uploaded_image(data, 'photo') or '')
        save_players(store, players)
        return jsonify({'success': True, 'player': player.to_dict()})

    # Group by team in team order; groups of deleted teams are not shown
    groups = []
    for team in load_teams(store):
        team_players = players.get(team.id, [])
        if team_players:
            groups.append({'team': team.to_dict(), 'players': [p.to_dict() for p in team_players]})
    return jsonify({'groups': groups})


@app.route('/api/players/edit', methods=['POST'])
def api_edit_player():
    data = _params()
    store = get_store()
    players = load_players(store)
    player = update_player(players, data.get('team_id'), data.get('id'), data.get('name'),
                           number=data.get('number'), position=data.get('position'),
                           photo=_uploaded_image(data, 'photo'))
    save_players(store, players)
    return jsonify({'success': True, 'player': player.to_dict()})


@app.route('/api/players/delete', methods=['POST'])
def api_delete_player():
    data = _params()
    store = get_store()
    players = load_players(store)
    delete_player(players, data.get('team_id'), data.get('id'))
    save_players(store, players)
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# Matches and standings
# ---------------------------------------------------------------------------

@app.route('/api/matches')
def api_matches():
    store = get_store()
    fixtures = resolve_fixtures(load_teams(store), load_matches(store))
    return jsonify({'matches': [
        {**match.to_dict(), 'home': home.to_dict(), 'away': away.to_dict()}
        for match, home, away in fixtures
    ]})


@app.route('/api/matches/generate', methods=['POST'])
def api_generate_matches():
    """Replace all matches with a fresh round-robin."""
    data = _params()
    settings = load_settings()
    start_date = _param(data, 'date', settings.get('competition_date') or date.today().isoformat())
    kickoff = _param(data, 'kickoff', settings['kickoff_time'])
    duration = _param(data, 'duration', settings['match_duration_minutes'])
    rest = _param(data, 'break', settings['break_minutes'])

    store = get_store()
    matches = generate_round_robin(load_teams(store), start_date, kickoff, duration, rest,
                                   max_teams=settings['max_teams'])
    save_matches(store, matches)
    app.logger.info(f'Generated {len(matches)} matches starting {start_date} {kickoff}')
    return jsonify({'success': True, 'matches': [m.to_dict() for m in matches]})


@app.route('/api/matches/clear', methods=['POST'])
def api_clear_matches():
    get_store().set('matches', [])
    return jsonify({'success': True})


@app.route('/api/matches/score', methods=['POST'])
def api_match_score():
    data = _params()
    store = get_store()
    matches = load_matches(store)
    match = record_score(matches, data.get('id'), data.get('side'), data.get('value'))
    save_matches(store, matches)
    return jsonify({'success': True, 'match': match.to_dict()})


@app.route('/api/matches/reschedule', methods=['POST'])
def api_reschedule_match():
    data = _params()
    store = get_store()
    matches = load_matches(store)
    match = reschedule_match(matches, data.get('id'), data.get('date'), data.get('time'))
    save_matches(store, matches)
    return jsonify({'success': True, 'match': match.to_dict()})


@app.route('/api/standings')
def api_standings():
    store = get_store()
    teams = load_teams(store)
    index = teams_by_id(teams)
    rows = []
    for position, row in enumerate(compute_standings(teams, load_matches(store)), start=1):
        team = index[row.team_id]
        rows.append({**row.to_dict(), 'position': position, 'name': team.name, 'logo': team.logo})
    return jsonify({'standings': rows})


# ---------------------------------------------------------------------------
# Knockout bracket
# ---------------------------------------------------------------------------

@app.route('/api/bracket')
def api_bracket():
    store = get_store()
    return jsonify(get_bracket_display(load_bracket(store), load_teams(store)))


@app.route('/api/bracket/generate', methods=['POST'])
def api_generate_bracket():
    """Seed the knockout bracket from the current league table."""
    settings = load_settings()
    store = get_store()
    teams = load_teams(store)
    bracket = seed_bracket_from_standings(teams, load_matches(store), max_slots=settings['bracket_max_slots'])
    save_bracket(store, bracket)
    return jsonify({'success': True, **get_bracket_display(bracket, teams)})


@app.route('/api/bracket/score', methods=['POST'])
def api_bracket_score():
    data = _params()
    store = get_store()
    bracket = load_bracket(store)
    record_bracket_score(bracket, data.get('id'), data.get('side'), data.get('value'))
    save_bracket(store, bracket)
    return jsonify({'success': True, **get_bracket_display(bracket, load_teams(store))})


@app.route('/api/bracket/reset', methods=['POST'])
def api_reset_bracket():
    save_bracket(get_store(), Bracket.empty())
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# Settings, backup and reset
# ---------------------------------------------------------------------------

@app.route('/api/settings', methods=['GET', 'POST'])
def api_settings():
    settings = load_settings()
    if request.method == 'GET':
        return jsonify(settings)

    data = _params()
    if 'competition_date' in data:
        settings['competition_date'] = data['competition_date'] or None
    if 'kickoff_time' in data:
        settings['kickoff_time'] = data['kickoff_time']
    for key in ('match_duration_minutes', 'break_minutes', 'max_teams', 'bracket_max_slots'):
        if key in data:
            settings[key] = to_whole_number(data[key], key)
    if settings['match_duration_minutes'] <= 0:
        raise ValidationError('Match duration must be greater than 0')
    if settings['break_minutes'] < 0:
        raise ValidationError('Break cannot be negative')
    if settings['max_teams'] < 2 or settings['bracket_max_slots'] < 2:
        raise ValidationError('Team limits must be at least 2')
    save_settings(settings)
    return jsonify({'success': True, 'settings': settings})


@app.route('/api/export')
def api_export():
    """Export all tournament data as a downloadable JSON document."""
    payload = document.dumps(document.build_document(get_store())).encode('utf-8')
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return send_file(
        io.BytesIO(payload),
        mimetype='application/json',
        as_attachment=True,
        download_name=f'tournament_export_{timestamp}.json',
    )


@app.route('/api/import', methods=['POST'])
def api_import():
    """Import a JSON document, replacing all current data."""
    file = request.files.get('file')
    if file and file.filename:
        content = file.read()
        if len(content) > MAX_UPLOAD_SIZE:
            raise DocumentImportError('Backup file is too large')
        data = document.loads(content)
    else:
        data = request.get_json(silent=True)
        if data is None:
            raise DocumentImportError('No backup file provided')

    document.import_document(get_store(), data, load_settings()['max_teams'])
    return jsonify({'success': True, 'teams': len(data['teams'])})


@app.route('/api/reset', methods=['POST'])
def api_reset_all():
    """Reset all tournament data."""
    get_store().reset()
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# Remote sync
# ---------------------------------------------------------------------------

@app.route('/api/sync/config', methods=['GET', 'POST'])
def api_sync_config():
    config = load_sync_config()
    if request.method == 'GET':
        return jsonify({'configured': bool(config and config.is_complete()),
                        'config': config.to_public_dict() if config else None})

    data = _params()
    token = data.get('token')
    if not token and config:
        token = config.token
    new_config = SyncConfig(
        owner=data.get('owner'),
        repo=data.get('repo'),
        token=token,
        path=data.get('path'),
        branch=data.get('branch'),
    )
    if not new_config.is_complete():
        raise ValidationError('Owner, repository and token are required')
    new_config.save(_file_path(SYNC_FILE_NAME))
    return jsonify({'success': True, 'config': new_config.to_public_dict()})


@app.route('/api/sync/config/clear', methods=['POST'])
def api_clear_sync_config():
    SyncConfig.clear(_file_path(SYNC_FILE_NAME))
    return jsonify({'success': True})


def _sync_adapter():
    return SyncAdapter(load_sync_config(), get_store(), load_settings()['max_teams'])


@app.route('/api/sync/pull', methods=['POST'])
def api_sync_pull():
    data = _sync_adapter().pull()
    return jsonify({'success': True, 'teams': len(data['teams'])})


@app.route('/api/sync/push', methods=['POST'])
def api_sync_push():
    commit = _sync_adapter().push()
    app.logger.info(f'Pushed tournament data, commit {commit}')
    return jsonify({'success': True, 'commit': commit})


if __name__ == '__main__':
    app.run(debug=True)
