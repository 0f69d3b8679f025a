"""
Credential sign-in for the Invoice Dashboard backend.

Credential checking is delegated to Supabase Auth (email + password). This
module only:
- validates the login form shape before calling Supabase
- turns Supabase Auth failures into an AuthError carrying a ``type``
- maps that ``type`` to the message shown under the login form
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import ValidationError
from supabase import AuthApiError
from supabase import AuthError as SupabaseAuthError

from invoice_dashboard.db.client import get_supabase_client
from invoice_dashboard.schemas.auth import LoginForm
from invoice_dashboard.utils.logging import get_logger

logger = get_logger(__name__)

CREDENTIALS_SIGNIN = "CredentialsSignin"
SERVICE_ERROR = "ServiceError"

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials."
GENERIC_AUTH_MESSAGE = "Something went wrong."


class AuthError(Exception):
    """Sign-in failed. ``type`` tells the caller which kind of failure."""

    def __init__(self, error_type: str, message: str = ""):
        super().__init__(message or error_type)
        self.type = error_type


@dataclass
class AuthSession:
    """Tokens returned by a successful sign-in."""
    user_id: str
    access_token: str
    expires_in: Optional[int] = None


def sign_in(email: Optional[str], password: Optional[str]) -> AuthSession:
    """
    Sign a user in with email and password.

    Raises:
        AuthError: CREDENTIALS_SIGNIN when the form is malformed or Supabase
            rejects the credentials, SERVICE_ERROR for any other Supabase
            Auth failure.

    Any other exception (network, misconfiguration) propagates unchanged.
    """
    try:
        form = LoginForm.model_validate({"email": email, "password": password})
    except ValidationError:
        logger.info("Login form rejected before reaching Supabase Auth")
        raise AuthError(CREDENTIALS_SIGNIN, "Login form failed validation")

    client = get_supabase_client()

    try:
        response = client.auth.sign_in_with_password(
            {"email": form.email, "password": form.password}
        )
    except AuthApiError as e:
        code = getattr(e, "code", None)
        if code == "invalid_credentials" or getattr(e, "status", None) == 400:
            logger.info("Supabase Auth rejected credentials")
            raise AuthError(CREDENTIALS_SIGNIN, e.message) from e
        logger.error(f"Supabase Auth API error: status={e.status}, code={code}")
        raise AuthError(SERVICE_ERROR, e.message) from e
    except SupabaseAuthError as e:
        logger.error(f"Supabase Auth error during sign-in: {e.message}")
        raise AuthError(SERVICE_ERROR, e.message) from e

    if response.session is None or response.user is None:
        logger.error("Supabase Auth returned no session for a successful sign-in")
        raise AuthError(SERVICE_ERROR, "No session returned")

    logger.info(f"User signed in: user_id={response.user.id}")

    return AuthSession(
        user_id=str(response.user.id),
        access_token=response.session.access_token,
        expires_in=response.session.expires_in,
    )


def authenticate(
    email: Optional[str],
    password: Optional[str],
) -> Tuple[Optional[str], Optional[AuthSession]]:
    """
    Run sign-in and translate failures into a login form message.

    Returns:
        (None, session) on success, (message, None) on an AuthError.
        Exceptions that are not AuthError propagate.
    """
    try:
        return None, sign_in(email, password)
    except AuthError as error:
        if error.type == CREDENTIALS_SIGNIN:
            return INVALID_CREDENTIALS_MESSAGE, None
        return GENERIC_AUTH_MESSAGE, None
