"""BFF GraphQL server - a GraphQL Backend for Frontend with optional Redis caching."""

from .app import create_app
from .cache import ActiveCache, NullCache, RedisCache, create_cache
from .config import Settings, load_settings
from .users import User, UserService

__version__ = "1.0.0"

__all__ = [
    "ActiveCache",
    "NullCache",
    "RedisCache",
    "Settings",
    "User",
    "UserService",
    "create_app",
    "create_cache",
    "load_settings",
]
