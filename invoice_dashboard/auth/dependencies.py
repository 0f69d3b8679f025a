"""
FastAPI dependency functions for authentication.

These functions verify the Supabase Auth access token and extract the
authenticated user_id. The token is read from the ``Authorization: Bearer``
header or, for browser form posts, from the session cookie set by /login.

Uses Supabase's JWT Signing Keys (ES256) fetched from the project's JWKS.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Optional

from fastapi import Cookie, Header, HTTPException, status
from jwt import PyJWKClient, decode
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError, PyJWKClientError

from invoice_dashboard.config import settings

logger = logging.getLogger(__name__)

# Caches JWKS responses and handles key rotation
_jwks_client: PyJWKClient | None = None


@dataclass
class AuthenticatedUser:
    """
    Represents an authenticated user with their token.

    Attributes:
        user_id: The user's UUID from the JWT token's 'sub' claim
        access_token: The full JWT access token (for creating authenticated Supabase clients)
    """
    user_id: str
    access_token: str


def _unauthorized(error: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "details": details}
    )


def get_jwks_client() -> PyJWKClient:
    """
    Get or create the JWKS client instance.

    Raises:
        ValueError: If SUPABASE_URL is not configured
    """
    global _jwks_client

    if _jwks_client is None:
        jwks_url = settings.SUPABASE_JWKS_URL
        if not jwks_url:
            raise ValueError(
                "SUPABASE_URL is not configured. "
                "Cannot construct JWKS URL for JWT verification."
            )

        logger.info(f"Initializing JWKS client with URL: {jwks_url}")
        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
        )

    return _jwks_client


def extract_token(authorization: Optional[str], session_token: Optional[str]) -> str:
    """
    Pick the access token from the Authorization header or the session cookie.

    The header wins when both are present.

    Raises:
        HTTPException: 401 if neither carries a usable token
    """
    if authorization:
        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            logger.warning("Invalid Authorization header format")
            raise _unauthorized("unauthorized", "Invalid Authorization header format")
        return parts[1]

    if session_token:
        return session_token

    logger.warning("Missing Authorization header and session cookie")
    raise _unauthorized("unauthorized", "Missing Authorization header")


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature, expiry, audience and issuer of a Supabase access token.

    Returns:
        The token payload.

    Raises:
        HTTPException: 401 on any verification failure
    """
    try:
        signing_key = get_jwks_client().get_signing_key_from_jwt(token)

        payload = decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            audience="authenticated",
            issuer=settings.SUPABASE_JWT_ISSUER,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_aud": True,
                "verify_iss": True,
            }
        )

    except ExpiredSignatureError:
        logger.warning("Token has expired")
        raise _unauthorized("token_expired", "Authentication token has expired")

    except PyJWKClientError as e:
        logger.error(f"JWKS client error: {str(e)}")
        raise _unauthorized("jwks_error", "Unable to verify token signature")

    except InvalidTokenError as e:
        logger.warning(f"Invalid token: {str(e)}")
        raise _unauthorized("invalid_token", "Invalid authentication token")

    except Exception as e:
        logger.error(f"Unexpected error during token verification: {str(e)}")
        raise _unauthorized("unauthorized", "Token verification failed")

    if not payload.get("sub"):
        logger.error("Token payload missing 'sub' claim")
        raise _unauthorized("unauthorized", "Invalid token: missing user ID")

    return payload


async def get_authenticated_user(
    authorization: Annotated[str | None, Header()] = None,
    session_token: Annotated[str | None, Cookie(alias=settings.SESSION_COOKIE_NAME)] = None,
) -> AuthenticatedUser:
    """
    Verify the caller's token and return the user with the token.

    Usage:
        @router.post("/dashboard/invoices/create")
        async def create_invoice_action(
            auth_user: AuthenticatedUser = Depends(get_authenticated_user)
        ):
            supabase_client = get_supabase_client(auth_user.access_token)

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = extract_token(authorization, session_token)
    payload = decode_access_token(token)
    user_id = str(payload["sub"])

    logger.debug(f"Token verified successfully for user_id={user_id}")

    return AuthenticatedUser(user_id=user_id, access_token=token)
