# /brandflow/utils/rate_limiter.py

from slowapi import Limiter
from brandflow.utils.request_utils import get_remote_address
from brandflow.config.settings import settings

# Shared limiter instance; both main.py and the route modules import it from here.

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"]
)
