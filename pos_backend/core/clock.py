"""
Timezone-aware UTC clock used for every stored timestamp
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
