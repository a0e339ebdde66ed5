"""
Tests for the file-backed entity store.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.store import EntityStore


class TestGetSet:

    def test_defaults_for_known_slices(self, store):
        assert store.get('teams') == []
        assert store.get('players') == {}
        assert store.get('matches') == []
        assert store.get('bracket') == {'rounds': []}

    def test_unknown_key_uses_default(self, store):
        assert store.get('other') is None
        assert store.get('other', 42) == 42

    def test_defaults_are_copies(self, store):
        store.get('teams').append({'id': 'x'})
        assert store.get('teams') == []

    def test_set_persists_yaml_file(self, store):
        teams = [{'id': 'a', 'name': 'Lions', 'logo': ''}]
        store.set('teams', teams)
        assert os.path.exists(os.path.join(store.data_dir, 'teams.yaml'))
        assert EntityStore(store.data_dir).get('teams') == teams

    def test_timestamp_strings_stay_strings(self, store):
        matches = [{'id': 'm', 'homeId': 'a', 'awayId': 'b', 'datetime': '2025-12-15T19:00:00',
                    'homeScore': 0, 'awayScore': 0}]
        store.set('matches', matches)
        assert store.get('matches') == matches

    def test_corrupt_file_falls_back_to_default(self, store):
        with open(os.path.join(store.data_dir, 'teams.yaml'), 'w', encoding='utf-8') as f:
            f.write('teams: [unclosed\n')
        assert store.get('teams') == []


class TestSubscribers:

    def test_set_notifies(self, store):
        seen = []
        store.subscribe(lambda key, value: seen.append((key, value)))
        store.set('matches', [])
        assert seen == [('matches', [])]

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(lambda key, value: seen.append(key))
        unsubscribe()
        store.set('matches', [])
        assert seen == []

    def test_failing_subscriber_does_not_block_others(self, store):
        seen = []

        def broken(key, value):
            raise RuntimeError('boom')

        store.subscribe(broken)
        store.subscribe(lambda key, value: seen.append(key))
        store.set('teams', [])
        assert seen == ['teams']
        assert store.get('teams') == []


class TestSnapshot:

    def test_replace_all_and_snapshot(self, store):
        snapshot = {
            'teams': [{'id': 'a', 'name': 'A', 'logo': ''}],
            'players': {'a': [{'id': 'p', 'name': 'P', 'number': None, 'position': None, 'photo': ''}]},
            'matches': [],
            'bracket': {'rounds': []},
        }
        store.replace_all(snapshot)
        assert store.snapshot() == snapshot

    def test_replace_all_fills_missing_slices(self, store):
        store.set('matches', [{'id': 'm'}])
        store.replace_all({'teams': []})
        assert store.get('matches') == []

    def test_replace_all_notifies_each_slice(self, store):
        seen = []
        store.subscribe(lambda key, value: seen.append(key))
        store.replace_all({'teams': []})
        assert sorted(seen) == ['bracket', 'matches', 'players', 'teams']

    def test_reset(self, store):
        store.set('teams', [{'id': 'a', 'name': 'A', 'logo': ''}])
        store.reset()
        assert store.snapshot() == {'teams': [], 'players': {}, 'matches': [], 'bracket': {'rounds': []}}
