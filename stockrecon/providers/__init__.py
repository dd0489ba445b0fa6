"""Data providers behind the Repository boundary."""

from .base import Repository
from .fmp import FMPRepository
from .rate_limiter import RateLimiter

__all__ = ["FMPRepository", "RateLimiter", "Repository"]
