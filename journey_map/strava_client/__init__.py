"""Modular Strava client components (tokens, session, rate limiter, fetchers)."""

from .activities import ActivitiesAPI, parse_activities  # noqa: F401
from .base import TokenManager, TokenState  # noqa: F401
from .rate_limiter import RateLimiter  # noqa: F401
from .session import create_default_session, get_default_session  # noqa: F401
