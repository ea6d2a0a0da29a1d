from slowapi import Limiter
from slowapi.util import get_remote_address
from storefront.config import settings

# Default limit applies to every route through SlowAPIMiddleware;
# checkout submission gets its own tighter limit.
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_PER_MINUTE])
