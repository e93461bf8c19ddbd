"""Admin session gate.

The gate owns the single administrator session of the running service. It
is created once by the application factory and handed to whatever needs
to know whether an administrator is signed in; nothing reaches it through
module globals.
"""

import logging
import secrets

from pydantic import BaseModel, Field

from storefront_service.auth.auth_client import AdminUser, AuthClient, AuthSession

logger = logging.getLogger(__name__)


class LoginCredentials(BaseModel):
    """Credentials submitted on the admin login surface."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResult(BaseModel):
    """Outcome of a login attempt."""

    success: bool
    user: AdminUser | None = None
    error: str | None = None


class SessionGate:
    """Tracks the administrator session and answers "is someone signed in?"."""

    def __init__(self, auth_client: AuthClient) -> None:
        """Initialize the gate with no session.

        Args:
            auth_client: Client for the hosted authentication API
        """
        self.auth_client = auth_client
        self._session: AuthSession | None = None
        # Every access token handed out for the current session, refreshes included
        self._issued_tokens: list[str] = []

    def _start(self, session: AuthSession) -> None:
        self._session = session
        self._issued_tokens = [session.access_token]

    async def initialize(self, refresh_token: str | None = None) -> bool:
        """Restore a session on application start, if one was persisted.

        Args:
            refresh_token: Refresh token of a previous session, if any

        Returns:
            True if a session was restored, False otherwise
        """
        if not refresh_token:
            logger.info("No stored admin session to restore")
            return False

        session = await self.auth_client.refresh_session(refresh_token)
        if session is None:
            logger.warning("Stored admin session could not be restored")
            return False

        self._start(session)
        logger.info(f"Restored admin session for user {session.user.id}")
        return True

    async def login(self, credentials: LoginCredentials) -> LoginResult:
        """Sign in and replace any current session.

        Args:
            credentials: Email and password

        Returns:
            LoginResult with the signed-in user, or an error message
        """
        session = await self.auth_client.sign_in_with_password(
            credentials.email, credentials.password
        )
        if session is None:
            return LoginResult(success=False, error="Invalid email or password")

        self._start(session)
        logger.info(f"Admin user {session.user.id} signed in")
        return LoginResult(success=True, user=session.user)

    async def logout(self) -> None:
        """Clear the session locally and revoke it on the auth service."""
        session = self._session
        self._session = None
        self._issued_tokens = []
        if session is None:
            return

        if not await self.auth_client.sign_out(session.access_token):
            logger.warning("Auth service did not acknowledge sign-out; session cleared locally")
        logger.info(f"Admin user {session.user.id} signed out")

    def is_authenticated(self) -> bool:
        return self._session is not None and not self._session.is_expired

    def current_user(self) -> AdminUser | None:
        return self._session.user if self.is_authenticated() and self._session else None

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    async def ensure_fresh(self) -> bool:
        """Refresh the session if its access token has expired.

        A refresh that the auth service rejects ends the session.

        Returns:
            True if an unexpired session is held afterwards, False otherwise
        """
        session = self._session
        if session is None:
            return False
        if not session.is_expired:
            return True

        refreshed = await self.auth_client.refresh_session(session.refresh_token)
        if self._session is not session:
            # Signed in or out while the refresh was in flight
            return self.is_authenticated()
        if refreshed is None:
            logger.warning(f"Admin session for user {session.user.id} could not be refreshed")
            self._session = None
            self._issued_tokens = []
            return False

        self._session = refreshed
        self._issued_tokens.append(refreshed.access_token)
        logger.info(f"Refreshed admin session for user {refreshed.user.id}")
        return True

    async def verify(self, token: str | None) -> bool:
        """Check that a presented token belongs to the signed-in administrator.

        Tokens this gate handed out are matched locally. Any other token is
        looked up on the auth service and accepted if it belongs to the same
        user, which is how a session restored at startup is reached.

        Args:
            token: Token from the request cookie or Authorization header

        Returns:
            bool: True if the token belongs to the current, unexpired session
        """
        if not token or not await self.ensure_fresh() or self._session is None:
            return False

        if any(secrets.compare_digest(token, issued) for issued in self._issued_tokens):
            return True

        owner_id = self._session.user.id
        user = await self.auth_client.get_user(token)
        return user is not None and user.id == owner_id
