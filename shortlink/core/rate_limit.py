"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- IP-based limiting
- Redirects get the highest limit; writes and imports the lowest
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Initialize rate limiter
# Uses IP address for rate limiting
limiter = Limiter(key_func=get_remote_address)

# Rate limit configurations per endpoint group
# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "bind": "30/minute",  # Create/update bindings
    "redirect": "100/minute",  # Redirects
    "admin": "60/minute",  # Inspect, delete, stats
    "import": "5/minute",  # Bulk CSV imports
}
