"""
API routers.

Contains the /users and /countries routes.
"""

from useraccounts.api.routers.countries import router as countries_router
from useraccounts.api.routers.users import router as users_router

__all__ = ["countries_router", "users_router"]
