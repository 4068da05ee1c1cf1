"""
Errors that abort a whole run rather than a single work item.
"""


class FatalError(Exception):
    """Marker base for errors that must never be retried or recorded as an item failure."""
    pass


class ConfigError(FatalError):
    """Missing or invalid configuration (e.g. an unset API secret)."""
    pass
