# Models package (re-export feature modules for stable imports)
from .users.user import User
from .auth.token import Token
from .media.creative import Creative

__all__ = [
    "User",
    "Token",
    "Creative",
]
