"""
Identity - who is using the app.

The services never look the user up themselves; callers resolve a User from
an IdentityProvider once and pass it into every call that needs an owner.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..config import Config
from ..errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    """Signed-in user."""
    id: str
    email: str
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.email


@dataclass(frozen=True)
class AuthState:
    """Snapshot delivered to auth subscribers."""
    user: Optional[User]
    is_loading: bool = False


AuthCallback = Callable[[AuthState], None]


class IdentityProvider(ABC):
    """Contract of an external identity provider."""

    def __init__(self) -> None:
        self._subscribers: List[AuthCallback] = []

    @abstractmethod
    async def current_user(self) -> User:
        """
        Resolve the signed-in user.

        Raises:
            AuthenticationError: nobody is signed in
        """
        pass

    @abstractmethod
    async def login(self) -> User:
        """Sign in and return the user."""
        pass

    @abstractmethod
    async def logout(self) -> None:
        """Sign out."""
        pass

    @abstractmethod
    def snapshot(self) -> AuthState:
        """Current auth state without waiting."""
        pass

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        """
        Subscribe to auth state changes.

        The current snapshot is delivered immediately.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)
        callback(self.snapshot())

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self) -> None:
        state = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                logger.exception("Auth subscriber failed")


class LocalIdentityProvider(IdentityProvider):
    """
    Single local profile, configured through MEMORA_USER_* variables.

    Starts signed in unless told otherwise.
    """

    def __init__(self, user: Optional[User] = None, signed_in: bool = True):
        super().__init__()
        self._profile = user or User(
            id=Config.USER_ID,
            email=Config.USER_EMAIL,
            display_name=Config.USER_NAME or None,
        )
        self._signed_in = signed_in

    def snapshot(self) -> AuthState:
        return AuthState(user=self._profile if self._signed_in else None, is_loading=False)

    async def current_user(self) -> User:
        if not self._signed_in:
            raise AuthenticationError("Please sign in to start learning")
        return self._profile

    async def login(self) -> User:
        if not self._signed_in:
            self._signed_in = True
            logger.info("Signed in as %s", self._profile.label)
            self._emit()
        return self._profile

    async def logout(self) -> None:
        if self._signed_in:
            self._signed_in = False
            logger.info("Signed out")
            self._emit()
