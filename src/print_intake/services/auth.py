"""Shared-secret gate for the operator dashboard."""

import hmac
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

AuthListener = Callable[[bool], Awaitable[None]]


@dataclass
class AuthGate:
    """Holds the dashboard session flag and notifies on transitions."""

    secret: str | None
    authenticated: bool = False
    _listeners: list[AuthListener] = field(default_factory=list)

    def subscribe(self, listener: AuthListener) -> None:
        """Call ``listener`` with the new flag whenever it changes."""
        self._listeners.append(listener)

    async def login(self, password: str) -> bool:
        """Open the session if the password matches the shared secret."""
        if not self.secret or not hmac.compare_digest(
            password.encode("utf-8"), self.secret.encode("utf-8")
        ):
            logger.warning("Dashboard login rejected")
            return False
        await self._set(True)
        return True

    async def logout(self) -> None:
        """Close the session."""
        await self._set(False)

    async def _set(self, value: bool) -> None:
        if value == self.authenticated:
            return
        self.authenticated = value
        logger.info("Dashboard session %s", "opened" if value else "closed")
        for listener in list(self._listeners):
            await listener(value)
