"""
Error taxonomy for the scheduler core.

- FetchError: feed unreachable or malformed → aborts one refresh run
- PersistenceError: store read/write failure → aborts the current job run
- DispatchError: mail transport failure → isolated to one user
"""


class NeoWatchError(Exception):
    """Base class for all NeoWatch errors."""


class FetchError(NeoWatchError):
    """Upstream hazard feed could not be fetched or parsed."""


class PersistenceError(NeoWatchError):
    """Hazard or preference store operation failed."""


class DispatchError(NeoWatchError):
    """A notification could not be delivered."""
