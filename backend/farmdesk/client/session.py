"""Explicit session context shared by every store of one client.

Stores receive the ``SessionContext`` in their constructor and subscribe to
its changes; nothing reads the signed-in user from module-level state.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from farmdesk.domain.exceptions import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """An authenticated user and the bearer token the backend issued for them."""

    user_id: str
    access_token: str


SessionListener = Callable[[Session | None], Awaitable[None]]


class SessionContext:
    def __init__(self, session: Session | None = None) -> None:
        self._session = session
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> Session | None:
        return self._session

    @property
    def user_id(self) -> str | None:
        return self._session.user_id if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def require(self, action: str = "continue") -> Session:
        """Return the active session or raise ``AuthError``."""
        if self._session is None:
            raise AuthError(f"You must be logged in to {action}.")
        return self._session

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register a coroutine called with the new session on every change.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def sign_in(self, session: Session) -> None:
        """Switch to ``session``. Listeners see the new user even when one was active."""
        previous = self.user_id
        self._session = session
        if previous and previous != session.user_id:
            logger.info("Session switched from %s to %s", previous, session.user_id)
        else:
            logger.info("Session started for %s", session.user_id)
        await self._notify()

    async def sign_out(self) -> None:
        if self._session is None:
            return
        logger.info("Session ended for %s", self._session.user_id)
        self._session = None
        await self._notify()

    async def _notify(self) -> None:
        session = self._session
        for listener in list(self._listeners):
            await listener(session)
