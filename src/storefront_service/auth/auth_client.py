"""Client for the hosted authentication API (GoTrue protocol, as served by Supabase)."""

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class AdminUser(BaseModel):
    """The authenticated administrator."""

    id: str = Field(..., description="User identifier issued by the auth service")
    email: str | None = Field(None, description="User email")


class AuthSession(BaseModel):
    """Tokens and user returned by a successful sign-in or refresh."""

    access_token: str
    refresh_token: str
    user: AdminUser
    expires_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= datetime.now(UTC)

    @classmethod
    def from_token_response(cls, data: dict[str, Any]) -> "AuthSession":
        """Create an AuthSession from a token endpoint response.

        Args:
            data: JSON body of the token endpoint

        Returns:
            AuthSession: Parsed session
        """
        expires_at = None
        if data.get("expires_at") is not None:
            expires_at = datetime.fromtimestamp(int(data["expires_at"]), tz=UTC)

        user = data.get("user") or {}
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            user=AdminUser(id=str(user.get("id", "")), email=user.get("email")),
            expires_at=expires_at,
        )


class AuthClient:
    """HTTP client for password sign-in, session refresh, token lookup and sign-out.

    Expected failures (bad credentials, network errors, timeouts) are logged
    and reported as None/False.
    """

    def __init__(self, base_url: str, api_key: str, timeout_seconds: float = 5.0) -> None:
        """Initialize the auth client.

        Args:
            base_url: Project URL of the hosted backend (e.g., "https://xyz.supabase.co")
            api_key: Public API key of the project
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    async def _token_request(self, grant_type: str, payload: dict[str, str]) -> AuthSession | None:
        url = f"{self.base_url}/auth/v1/token"
        headers = {"apikey": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    url, headers=headers, params={"grant_type": grant_type}, json=payload
                )
                response.raise_for_status()
                return AuthSession.from_token_response(response.json())

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Auth token request ({grant_type}) failed: {e}")
            return None
        except (KeyError, ValueError, ValidationError) as e:
            logger.error(f"Auth token response ({grant_type}) was malformed: {e}")
            return None

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession | None:
        """Sign in with email and password.

        Args:
            email: Administrator email
            password: Administrator password

        Returns:
            AuthSession on success, None if the credentials were rejected or the request failed
        """
        return await self._token_request("password", {"email": email, "password": password})

    async def refresh_session(self, refresh_token: str) -> AuthSession | None:
        """Exchange a refresh token for a new session.

        Args:
            refresh_token: Refresh token from an earlier session

        Returns:
            AuthSession on success, None otherwise
        """
        return await self._token_request("refresh_token", {"refresh_token": refresh_token})

    async def get_user(self, access_token: str) -> AdminUser | None:
        """Resolve the user owning an access token.

        Args:
            access_token: Access token presented by a caller

        Returns:
            AdminUser if the auth service accepts the token, None otherwise
        """
        url = f"{self.base_url}/auth/v1/user"
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {access_token}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                data = response.json()
                return AdminUser(id=str(data["id"]), email=data.get("email"))

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.warning(f"Auth service rejected access token: {e}")
            return None
        except (KeyError, ValueError, ValidationError) as e:
            logger.error(f"Auth user response was malformed: {e}")
            return None

    async def sign_out(self, access_token: str) -> bool:
        """Revoke a session on the auth service.

        Args:
            access_token: Access token of the session to revoke

        Returns:
            bool: True if the auth service acknowledged the sign-out
        """
        url = f"{self.base_url}/auth/v1/logout"
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {access_token}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, headers=headers)
                response.raise_for_status()
            return True

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Auth sign-out failed: {e}")
            return False
