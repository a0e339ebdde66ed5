import uuid


def new_id() -> str:
    """Return a new opaque identifier for a team, player, match or bracket node."""
    return uuid.uuid4().hex
