"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, Field, field_validator

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.schemas.common import normalize_email, normalize_role


class RegisterRequest(BaseModel):
    """Sign-up payload: credentials plus the employee profile."""

    email: str
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    name: str = Field(..., min_length=1, max_length=255)
    department: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, description="staff, manager, director or hr (any case)")
    emp_id: str = Field(..., min_length=1, max_length=64, description="Employee ID, e.g. TEST001")

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        return normalize_role(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("name", "department", "emp_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must be non-empty")
        return stripped


class RegisterResponse(BaseModel):
    ok: bool = True
    requires_email_confirm: bool = Field(
        ...,
        description="True when the auth provider did not open a session (email confirmation pending).",
    )


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class CurrentUser(BaseModel):
    """Authenticated employee resolved from the bearer token, for dependency injection."""

    id: str
    emp_id: str
    name: str
    email: str
    role: str
    department: str | None = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str | None = Field(default=None, description="Refresh token (hosted auth only)")
    token_type: str = Field(default="bearer", description="Token type")
    user: CurrentUser


class ProviderSignUpResult(BaseModel):
    """Outcome of a sign-up against the hosted auth service."""

    user_id: str | None = None
    has_session: bool = False


class ProviderSession(BaseModel):
    """Session returned by a password sign-in against the hosted auth service."""

    user_id: str
    access_token: str
    refresh_token: str | None = None
