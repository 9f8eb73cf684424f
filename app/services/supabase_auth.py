"""Sign-up and password sign-in against the hosted (Supabase GoTrue) auth REST API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from app.schemas.auth import ProviderSession, ProviderSignUpResult

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class AuthProviderNotConfiguredError(Exception):
    """Raised when hosted auth is invoked but SUPABASE_URL / SUPABASE_ANON_KEY are missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthProviderError(Exception):
    """Raised when the auth service rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _is_configured(settings: Settings) -> bool:
    if not settings.SUPABASE_URL or not settings.SUPABASE_URL.strip():
        return False
    if settings.SUPABASE_ANON_KEY is None:
        return False
    return bool(settings.SUPABASE_ANON_KEY.get_secret_value().strip())


def _headers(settings: Settings) -> dict[str, str]:
    if settings.SUPABASE_ANON_KEY is None:
        raise AuthProviderNotConfiguredError("SUPABASE_ANON_KEY is not set.")
    key = settings.SUPABASE_ANON_KEY.get_secret_value()
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
    }


def _error_detail(resp: httpx.Response) -> str:
    """Pull the human-readable message out of an auth error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500] if resp.text else "Unknown error"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value[:500]
    return str(body)[:500]


async def _post(
    settings: Settings,
    path: str,
    payload: dict[str, Any],
    params: dict[str, str] | None = None,
) -> dict[str, Any]:
    if not _is_configured(settings):
        raise AuthProviderNotConfiguredError(
            "Hosted auth is not configured; set SUPABASE_URL and SUPABASE_ANON_KEY."
        )
    url = f"{(settings.SUPABASE_URL or '').rstrip('/')}{path}"
    timeout = settings.SUPABASE_REQUEST_TIMEOUT_SEC
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(url, json=payload, params=params, headers=_headers(settings))
    except httpx.TimeoutException as e:
        raise AuthProviderError(f"Auth service timed out after {timeout}s.") from e
    except httpx.RequestError as e:
        raise AuthProviderError(f"Auth service unreachable: {e}") from e
    if resp.status_code >= 400:
        raise AuthProviderError(_error_detail(resp), resp.status_code)
    try:
        data = resp.json()
    except ValueError as e:
        raise AuthProviderError("Auth service returned invalid JSON.", resp.status_code) from e
    if not isinstance(data, dict):
        raise AuthProviderError("Auth service returned an unexpected body.", resp.status_code)
    return data


async def sign_up(
    email: str,
    password: str,
    metadata: dict[str, Any],
    settings: Settings,
) -> ProviderSignUpResult:
    """
    Create an auth user with profile metadata.

    With email confirmation enabled the service answers with the bare user object
    and no session; otherwise it answers with a session wrapping the user.
    """
    data = await _post(
        settings,
        "/auth/v1/signup",
        {"email": email, "password": password, "data": metadata},
    )
    user = data.get("user") if isinstance(data.get("user"), dict) else data
    user_id = user.get("id") if isinstance(user, dict) else None
    has_session = bool(data.get("access_token"))
    logger.info(
        "Hosted sign-up completed",
        extra={"has_user_id": bool(user_id), "has_session": has_session},
    )
    return ProviderSignUpResult(user_id=user_id, has_session=has_session)


async def sign_in_with_password(email: str, password: str, settings: Settings) -> ProviderSession:
    """Exchange email/password for an access token. Raises AuthProviderError on bad credentials."""
    data = await _post(
        settings,
        "/auth/v1/token",
        {"email": email, "password": password},
        params={"grant_type": "password"},
    )
    access_token = data.get("access_token")
    user = data.get("user") or {}
    user_id = user.get("id") if isinstance(user, dict) else None
    if not access_token or not user_id:
        raise AuthProviderError("Auth service response missing session.")
    return ProviderSession(
        user_id=user_id,
        access_token=access_token,
        refresh_token=data.get("refresh_token"),
    )
