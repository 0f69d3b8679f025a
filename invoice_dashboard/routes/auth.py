"""
Login and logout form actions.

- POST /login  - Check credentials with Supabase Auth, set the session cookie
- POST /logout - Clear the session cookie
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Form, status
from fastapi.responses import JSONResponse, RedirectResponse

from invoice_dashboard.auth.auth import authenticate
from invoice_dashboard.config import settings
from invoice_dashboard.schemas.auth import LoginFormState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _safe_redirect_target(redirect_to: Optional[str]) -> str:
    """Only same-site absolute paths are honoured; anything else goes to the dashboard."""
    if redirect_to and redirect_to.startswith("/") and not redirect_to.startswith("//"):
        return redirect_to
    return settings.LOGIN_REDIRECT_PATH


@router.post(
    "/login",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Submit the login form",
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": LoginFormState},
    },
)
async def login_action(
    email: Annotated[Optional[str], Form()] = None,
    password: Annotated[Optional[str], Form()] = None,
    redirect_to: Annotated[Optional[str], Form(alias="redirectTo")] = None,
):
    """
    Sign in with email and password.

    Success: 303 to ``redirectTo`` (or the dashboard) with an HttpOnly
    session cookie holding the Supabase access token.

    Failure: 401 with ``{"message": "Invalid credentials."}`` for rejected
    credentials or ``{"message": "Something went wrong."}`` for any other
    auth failure. Errors outside the auth library are not caught here.
    """
    message, session = authenticate(email, password)

    if session is None:
        logger.info("Login failed")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=LoginFormState(message=message).model_dump(),
        )

    response = RedirectResponse(
        url=_safe_redirect_target(redirect_to),
        status_code=status.HTTP_303_SEE_OTHER,
    )
    max_age = session.expires_in or settings.SESSION_MAX_AGE
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.access_token,
        httponly=True,
        max_age=max_age,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return response


@router.post(
    "/logout",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Sign out",
)
async def logout_action() -> RedirectResponse:
    """Clear the session cookie and send the browser to the login page."""
    response = RedirectResponse(url=settings.LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME)
    return response
