"""FastAPI dependencies enforcing the admin session gate.

Provides helpers used by the admin routes to read the session tokens from a
request and to turn unauthenticated access into a redirect to the login surface.
"""

from fastapi import HTTPException

from storefront_service.auth.auth_client import AdminUser
from storefront_service.auth.session_gate import SessionGate

SESSION_COOKIE = "admin_session"
LOGIN_PATH = "/admin/login"


def extract_session_tokens(cookie_token: str | None, authorization: str | None) -> list[str]:
    """Collect the session tokens a request carries, cookie first, then bearer header.

    Args:
        cookie_token: Value of the admin session cookie
        authorization: Value of the Authorization header

    Returns:
        The tokens in the order they should be tried; empty if there are none
    """
    tokens: list[str] = []
    if cookie_token:
        tokens.append(cookie_token)
    if authorization and authorization.lower().startswith("bearer "):
        bearer = authorization[len("bearer ") :].strip()
        if bearer and bearer not in tokens:
            tokens.append(bearer)
    return tokens


async def get_admin_from_tokens(session_tokens: list[str], gate: SessionGate) -> AdminUser:
    """Resolve the signed-in administrator or redirect to the login surface.

    Args:
        session_tokens: Tokens presented by the request, tried in order
        gate: The application's session gate

    Returns:
        AdminUser: The administrator owning the session

    Raises:
        HTTPException: 303 redirect to the login surface if not authenticated
    """
    for token in session_tokens:
        if await gate.verify(token):
            user = gate.current_user()
            if user is not None:
                return user
    raise HTTPException(status_code=303, detail="Login required", headers={"Location": LOGIN_PATH})
