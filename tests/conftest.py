"""
Shared pytest fixtures for league manager tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.models import Team, Match
from league.store import EntityStore


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the web app at an empty temporary data directory."""
    import league_app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return str(data_dir)


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from league_app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def store(tmp_path):
    return EntityStore(str(tmp_path / "store"))


@pytest.fixture
def sample_teams():
    """Four teams in entry order."""
    return [
        Team(id="t1", name="Lions"),
        Team(id="t2", name="Tigers"),
        Team(id="t3", name="Bears"),
        Team(id="t4", name="Wolves"),
    ]


@pytest.fixture
def sequential_ids():
    """Deterministic id factory: id1, id2, ..."""
    counter = {'n': 0}

    def factory():
        counter['n'] += 1
        return f"id{counter['n']}"
    return factory


def make_match(match_id, home_id, away_id, home_score=0, away_score=0):
    return Match(id=match_id, home_id=home_id, away_id=away_id,
                 datetime="2025-12-15T19:00:00", home_score=home_score, away_score=away_score)
