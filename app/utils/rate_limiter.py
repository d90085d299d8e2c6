import logging
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import RATE_LIMIT_ENABLED

logger = logging.getLogger(__name__)

# Shared by app.state.limiter and the route decorators
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

if not RATE_LIMIT_ENABLED:
    logger.info("Rate limiting disabled (RATE_LIMIT_ENABLED=0)")
