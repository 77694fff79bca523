"""Abstract repository interface (port) for user profiles."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from farmdesk.domain.entities import Profile


class ProfileRepository(ABC):
    """Port for profile persistence — one row per user, keyed by user id."""

    @abstractmethod
    async def get(self, user_id: str) -> Profile | None:
        """Retrieve the user's profile, or None if it was never created."""
        ...

    @abstractmethod
    async def save(self, profile: Profile) -> Profile:
        """Insert or update the profile row."""
        ...


ProfileRepositoryScope = Callable[[], AbstractAsyncContextManager[ProfileRepository]]
