"""
Authentication Provider

The tracker never authenticates anyone itself. It only needs to know the
current user id and to hear about sign-in / sign-out so repositories can
re-scope their subscriptions.

"No user" is not an error: repositories expose empty collections.
"""

import inspect
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union

import structlog


logger = structlog.get_logger(__name__)

AuthListener = Callable[[Optional[str]], Union[None, Awaitable[None]]]


class AuthProvider(ABC):
    """Source of the current user identity."""

    @property
    @abstractmethod
    def current_user_id(self) -> Optional[str]:
        pass

    @abstractmethod
    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        """
        Register a callback for session changes.

        The listener receives the new user id (None after sign-out).

        Returns:
            A function that removes the listener
        """
        pass


class SessionAuthProvider(AuthProvider):
    """
    In-process session holder.

    sign_in/sign_out are async so listeners (repository refreshes)
    complete before the call returns.
    """

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id
        self._listeners: list[AuthListener] = []

    @property
    def current_user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id is required to sign in")
        if user_id == self._user_id:
            return
        self._user_id = user_id
        logger.info("user_signed_in", user_id=user_id)
        await self._emit()

    async def sign_out(self) -> None:
        if self._user_id is None:
            return
        logger.info("user_signed_out", user_id=self._user_id)
        self._user_id = None
        await self._emit()

    async def _emit(self) -> None:
        for listener in list(self._listeners):
            result = listener(self._user_id)
            if inspect.isawaitable(result):
                await result
