"""Exception hierarchy shared by every layer."""


class ShobdoError(Exception):
    """Base class for all shobdo errors."""


class StoreError(ShobdoError):
    """A persistence adapter failed to read or write."""


class SessionStateError(ShobdoError):
    """A session operation was called in a state that does not allow it."""
