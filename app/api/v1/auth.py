"""Registration, login and the auth dependencies (get_current_user, require_roles)."""

import logging
import uuid
from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.models import User
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from app.services.supabase_auth import (
    AuthProviderError,
    AuthProviderNotConfiguredError,
    sign_in_with_password,
    sign_up,
)

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

ROLE_LABELS = {"staff": "Staff", "manager": "Manager", "director": "Director", "hr": "HR"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _check_not_registered(db: Session, body: RegisterRequest) -> None:
    if db.query(User.id).filter(User.emp_id == body.emp_id).first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Employee ID already registered")
    if db.query(User.id).filter(User.email == body.email).first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")


def _provider_http_error(e: Exception, default_status: int) -> HTTPException:
    if isinstance(e, AuthProviderNotConfiguredError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    code = getattr(e, "status_code", None)
    if code is None or code >= 500:
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return HTTPException(status_code=default_status, detail=e.message)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> RegisterResponse:
    """
    Create an employee. With AUTH_PROVIDER=supabase the credentials go to the hosted
    auth service and the profile row is keyed by the auth user id it returns.
    """
    settings = get_settings()
    _check_not_registered(db, body)

    requires_email_confirm = False
    if settings.AUTH_PROVIDER == "supabase":
        try:
            result = await sign_up(
                body.email,
                body.password,
                {
                    "name": body.name,
                    "department": body.department,
                    "role": body.role,
                    "emp_id": body.emp_id,
                },
                settings,
            )
        except (AuthProviderError, AuthProviderNotConfiguredError) as e:
            logger.warning("Hosted sign-up failed", extra={"reason": e.message[:500]})
            raise _provider_http_error(e, status.HTTP_400_BAD_REQUEST) from e
        requires_email_confirm = not result.has_session
        if not result.user_id:
            return RegisterResponse(requires_email_confirm=requires_email_confirm)
        user = db.get(User, result.user_id) or User(id=result.user_id)
        password_hash = None
    else:
        user = User(id=str(uuid.uuid4()))
        password_hash = hash_password(body.password)

    user.emp_id = body.emp_id
    user.name = body.name
    user.email = body.email
    user.department = body.department
    user.role = body.role
    user.password_hash = password_hash
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Employee ID or email already registered",
        ) from e
    logger.info("Registered employee", extra={"emp_id": body.emp_id, "role": body.role})
    return RegisterResponse(requires_email_confirm=requires_email_confirm)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns an access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    settings = get_settings()
    email = body.email.strip()
    if settings.AUTH_PROVIDER == "supabase":
        try:
            session = await sign_in_with_password(email, body.password, settings)
        except (AuthProviderError, AuthProviderNotConfiguredError) as e:
            raise _provider_http_error(e, status.HTTP_401_UNAUTHORIZED) from e
        user = db.get(User, session.user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee profile not found")
        return TokenResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            user=CurrentUser.model_validate(user),
        )

    user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    token = create_access_token(sub=user.id, role=user.role, email=user.email)
    return TokenResponse(access_token=token, user=CurrentUser.model_validate(user))


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current employee. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub or not isinstance(sub, str):
        raise _unauthorized("Invalid token payload")
    user = db.query(User).filter(User.id == sub).first()
    if user is None:
        raise _unauthorized("User not found")
    return CurrentUser.model_validate(user)


def require_roles(*roles: str) -> Callable[[CurrentUser], CurrentUser]:
    """Dependency factory: 403 unless the current user's role is one of `roles`."""
    allowed = frozenset(r.lower() for r in roles)
    label = " or ".join(ROLE_LABELS.get(r, r.title()) for r in roles)

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if (current_user.role or "").lower() not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {label} role required.",
            )
        return current_user

    return dependency


@router.get("/me", response_model=CurrentUser)
def me(current_user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
    return current_user
