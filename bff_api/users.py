"""User data access - static dataset read through the cache."""

import asyncio

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from .cache import Cache, cache_key


class User(BaseModel):
    """Example domain entity."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str


USERS: tuple[User, ...] = (
    User(id="1", name="John Doe", email="john@example.com"),
    User(id="2", name="Jane Doe", email="jane@example.com"),
)


class UserRepository:
    """Read-only in-memory stand-in for a real data source."""

    def __init__(self, users: tuple[User, ...] = USERS):
        self._users = users
        self.scans = 0

    def find(self, user_id: str) -> User | None:
        """Linear scan for a user by id."""
        self.scans += 1
        return next((user for user in self._users if user.id == user_id), None)


class UserService:
    """Cache-aside lookup of users.

    Cache hits are returned as-is with no revalidation, so an entry can be
    stale for up to its TTL. Population runs in the background and does not
    delay the response.
    """

    namespace = "user"

    def __init__(self, repository: UserRepository, cache: Cache, ttl: int | None = None):
        self.repository = repository
        self.cache = cache
        self.ttl = ttl
        self._pending: set[asyncio.Task[None]] = set()

    async def get_user(self, user_id: str) -> User | None:
        """Get a user by id, or None when it does not exist.

        Args:
            user_id: User identifier.

        Returns:
            The matching user, from cache when possible.
        """
        key = cache_key(self.namespace, user_id)
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                user = User.model_validate(cached)
            except ValidationError as e:
                logger.warning(f"Discarding malformed cache entry {key}: {e}")
            else:
                logger.debug(f"Cache hit for {key}")
                return user

        user = self.repository.find(user_id)
        if user is None:
            return None

        task = asyncio.create_task(self._populate(key, user))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return user

    async def _populate(self, key: str, user: User) -> None:
        try:
            await self.cache.set(key, user.model_dump(), self.ttl)
        except Exception as e:
            logger.warning(f"Cache population failed for {key}: {e}")

    async def wait_pending(self) -> None:
        """Wait for in-flight cache populations to finish."""
        if self._pending:
            await asyncio.gather(*self._pending)
