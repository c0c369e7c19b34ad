from slowapi import Limiter
from slowapi.util import get_remote_address

from albumshare.config import Settings


def build_limiter(settings: Settings) -> Limiter:
    """One limiter per app, with its own in-memory counters."""
    # IP-based key; share links carry no identity to limit on
    return Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
