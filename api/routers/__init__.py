"""
Router package for the workout parser API.

- health: Liveness and configuration status
- parse: Workout text parsing
"""

from api.routers.health import router as health_router
from api.routers.parse import router as parse_router

__all__ = [
    "health_router",
    "parse_router",
]
