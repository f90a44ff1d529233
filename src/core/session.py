"""
Authentication state of the client: bearer token plus the logged in user.
"""

from collections.abc import Callable

from errors import PermissionDeniedError
from models import User
from utils.logger import get_logger

logger = get_logger(__name__)

SessionListener = Callable[["SessionState"], None]


class SessionState:
    """
    Token and user of the current login, or neither.

    Token and user are always set and cleared together. Listeners are
    notified after every actual transition (not on no-op logouts).
    """

    def __init__(self):
        self._token: str | None = None
        self._user: User | None = None
        self._listeners: list[SessionListener] = []

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_logged_in(self) -> bool:
        return self._token is not None and self._user is not None

    @property
    def is_admin(self) -> bool:
        return self.is_logged_in and self._user.is_admin

    @property
    def account_id(self) -> int | None:
        return self._user.id if self._user is not None else None

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def login(self, token: str, user: User) -> None:
        self._token, self._user = token, user
        logger.info("Logged in", user_id=user.id, is_admin=user.is_admin)
        self._notify()

    def logout(self) -> None:
        """Forget token and user. Calling it while logged out does nothing."""
        if self._token is None and self._user is None:
            return
        self._token, self._user = None, None
        logger.info("Logged out")
        self._notify()

    def invalidate(self) -> None:
        """The server rejected the token."""
        if self.is_logged_in:
            logger.warning("Session invalidated by server")
        self.logout()

    reset = logout

    def require_admin(self) -> None:
        """
        Raises:
            PermissionDeniedError: not logged in, or logged in without admin rights
        """
        if not self.is_logged_in:
            raise PermissionDeniedError("Login required.")
        if not self.is_admin:
            raise PermissionDeniedError("You do not have permission for this operation.")

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


__all__ = ["SessionState", "SessionListener"]
