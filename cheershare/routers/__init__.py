# Routers package
from . import auth_router
from . import creatives_router
from . import users_router

__all__ = [
    "auth_router",
    "creatives_router",
    "users_router",
]
