"""
Exceptions raised by the league engine.

A match or bracket node that points at a deleted team is not an error:
see ``league.models.resolve_teams`` for that policy.
"""


class LeagueError(Exception):
    """Base class for all league errors."""


class ValidationError(LeagueError):
    """Bad user input: too few teams, an empty name, an unknown id."""


class DocumentImportError(LeagueError):
    """A backup document was malformed or over the team limit."""


class RemoteSyncError(LeagueError):
    """The remote store could not be read or written."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status
