"""
Onetime Secret platform.

Share a secret through a link that works exactly once. This package holds
the JSON API, the use cases behind it, the Redis-backed records, and the
windowed rate limiter that throttles every mutating action.
"""

__version__ = "0.1.0"


def get_version() -> str:
    """Get platform version."""
    return __version__
