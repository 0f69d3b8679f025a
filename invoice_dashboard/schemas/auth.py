"""
Pydantic schemas for the login form.
"""

from typing import Optional
from pydantic import BaseModel, Field


class LoginForm(BaseModel):
    """
    Fields posted by the login form.

    Checked before credentials are sent to Supabase Auth; a form that fails
    here is reported to the user exactly like wrong credentials.
    """
    email: str = Field(
        ...,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Account email address",
        examples=["user@nextmail.com"]
    )
    password: str = Field(..., min_length=6, description="Account password")


class LoginFormState(BaseModel):
    """
    Returned to the login form when sign-in fails.

    ``message`` is either "Invalid credentials." or "Something went wrong."
    """
    message: Optional[str] = Field(None, description="User-facing error message")
