"""
Mirror the tournament document to a file in a GitHub repository.

The remote copy is a backup, never the source of truth: a failed pull or
push raises RemoteSyncError and leaves local data alone. There is no merge;
the last push wins.
"""
import base64
import logging
import os
from typing import Optional

import requests
import yaml

from league import document
from league.errors import DocumentImportError, RemoteSyncError
from league.store import EntityStore

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.github.com'
DEFAULT_PATH = 'tournament.json'
DEFAULT_BRANCH = 'main'
REQUEST_TIMEOUT = 30  # seconds


class SyncConfig:
    """Where and how to mirror the document. Loaded at startup, updated and cleared explicitly."""

    def __init__(self, owner, repo, token, path=DEFAULT_PATH, branch=DEFAULT_BRANCH, api_url=DEFAULT_API_URL):
        self.owner = (owner or '').strip()
        self.repo = (repo or '').strip()
        self.token = (token or '').strip()
        self.path = (path or DEFAULT_PATH).strip().lstrip('/')
        self.branch = (branch or DEFAULT_BRANCH).strip()
        self.api_url = (api_url or DEFAULT_API_URL).rstrip('/')

    @classmethod
    def from_dict(cls, data):
        return cls(
            owner=data.get('owner'),
            repo=data.get('repo'),
            token=data.get('token'),
            path=data.get('path'),
            branch=data.get('branch'),
            api_url=data.get('api_url'),
        )

    def to_dict(self):
        return {
            'owner': self.owner,
            'repo': self.repo,
            'token': self.token,
            'path': self.path,
            'branch': self.branch,
            'api_url': self.api_url,
        }

    def to_public_dict(self):
        data = self.to_dict()
        data['token'] = '****' + self.token[-4:] if self.token else ''
        return data

    def is_complete(self) -> bool:
        return bool(self.owner and self.repo and self.token)

    @classmethod
    def load(cls, file_path: str) -> Optional['SyncConfig']:
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning('Failed to parse %s: %s', file_path, e)
            return None
        if not isinstance(data, dict):
            return None
        return cls.from_dict(data)

    def save(self, file_path: str) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    @staticmethod
    def clear(file_path: str) -> None:
        if os.path.exists(file_path):
            os.remove(file_path)

    def __repr__(self):
        return f"SyncConfig(owner={self.owner}, repo={self.repo}, path={self.path}, branch={self.branch})"


class GitHubContentsStore:
    """Read and write whole files through the GitHub contents API."""

    def __init__(self, config: SyncConfig, session=None):
        self.config = config
        self.session = session or requests.Session()

    def _url(self, path):
        return f'{self.config.api_url}/repos/{self.config.owner}/{self.config.repo}/contents/{path}'

    def _headers(self):
        return {
            'Authorization': f'Bearer {self.config.token}',
            'Accept': 'application/vnd.github+json',
        }

    def _request(self, method, path, **kwargs):
        try:
            return self.session.request(method, self._url(path), headers=self._headers(),
                                        timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            raise RemoteSyncError(f'Could not reach {self.config.api_url}: {e}')

    @staticmethod
    def _raise_for_status(response, action):
        status = response.status_code
        if status < 400:
            return
        if status in (401, 403):
            message = 'GitHub rejected the token'
        elif status == 404:
            message = 'File or repository not found'
        elif status in (409, 422):
            message = 'The remote file changed while saving, try again'
        else:
            message = f'GitHub returned HTTP {status}'
        raise RemoteSyncError(f'Failed to {action}: {message}', status=status)

    def get_sha(self, path: str) -> Optional[str]:
        """SHA of the current remote file, or None if it does not exist yet."""
        response = self._request('GET', path, params={'ref': self.config.branch})
        if response.status_code == 404:
            return None
        self._raise_for_status(response, 'look up remote file')
        return response.json().get('sha')

    def read(self, path: str) -> bytes:
        response = self._request('GET', path, params={'ref': self.config.branch})
        self._raise_for_status(response, 'read remote file')
        try:
            return base64.b64decode(response.json()['content'])
        except (KeyError, ValueError, TypeError) as e:
            raise RemoteSyncError(f'Failed to decode remote file: {e}')

    def write(self, path: str, data: bytes, message: str) -> str:
        """Create or replace ``path``; returns the commit SHA."""
        payload = {
            'message': message,
            'content': base64.b64encode(data).decode('ascii'),
            'branch': self.config.branch,
        }
        sha = self.get_sha(path)
        if sha:
            payload['sha'] = sha
        response = self._request('PUT', path, json=payload)
        self._raise_for_status(response, 'save remote file')
        try:
            commit = response.json()['commit']['sha']
        except (KeyError, ValueError, TypeError) as e:
            raise RemoteSyncError(f'Unexpected response from GitHub: {e}')
        logger.info('%s %s@%s (commit %s)', 'Updated' if sha else 'Created', path, self.config.branch, commit)
        return commit


class SyncAdapter:
    def __init__(self, config: SyncConfig, store: EntityStore, max_teams: int, remote=None):
        if config is None or not config.is_complete():
            raise RemoteSyncError('Remote sync is not configured')
        self.config = config
        self.store = store
        self.max_teams = max_teams
        self.remote = remote or GitHubContentsStore(config)

    def pull(self) -> dict:
        """Replace local data with the remote document."""
        raw = self.remote.read(self.config.path)
        try:
            data = document.loads(raw)
            document.import_document(self.store, data, self.max_teams)
        except DocumentImportError as e:
            raise RemoteSyncError(f'Remote document rejected: {e}')
        logger.info('Pulled %s from %s/%s', self.config.path, self.config.owner, self.config.repo)
        return data

    def push(self, message: str = 'Update tournament data') -> str:
        """Write the full local snapshot to the remote file."""
        payload = document.dumps(document.build_document(self.store)).encode('utf-8')
        return self.remote.write(self.config.path, payload, message)
