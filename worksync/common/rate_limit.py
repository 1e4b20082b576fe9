"""Rate limiting configuration using slowapi.

Provides a module-level Limiter instance wired into the FastAPI app in
main.py. Check-in/out routes tighten it with ``@limiter.limit``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from worksync.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
)
