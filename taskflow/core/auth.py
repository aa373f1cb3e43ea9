"""Session provider: resolves the signed-in identity for Clerk and local-token modes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from hmac import compare_digest
from typing import TYPE_CHECKING, Literal

import httpx
from clerk_backend_api import Clerk
from clerk_backend_api.models.clerkerrors import ClerkErrors
from clerk_backend_api.models.sdkerror import SDKError
from clerk_backend_api.security.types import AuthenticateRequestOptions, AuthStatus, RequestState
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from taskflow.core.auth_mode import AuthMode
from taskflow.core.config import settings
from taskflow.core.logging import get_logger

if TYPE_CHECKING:
    from clerk_backend_api.models.user import User as ClerkUser

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)
SECURITY_DEP = Depends(security)
LOCAL_AUTH_USER_ID = "local-auth-user"
LOCAL_AUTH_EMAIL = "admin@home.local"
CLERK_TIMEOUT_MS = 5000


class ClerkTokenPayload(BaseModel):
    """JWT claims payload shape required from Clerk tokens."""

    sub: str
    sid: str | None = None


@dataclass(frozen=True)
class Identity:
    """Authenticated user every repository call is scoped to."""

    id: str
    email: str | None = None
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None
    session_id: str | None = None


@dataclass
class AuthContext:
    """Authenticated user context resolved from inbound auth headers."""

    actor_type: Literal["user"]
    identity: Identity | None = None


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    value = authorization.strip()
    if not value:
        return None
    if not value.lower().startswith("bearer "):
        return None
    token = value.split(" ", maxsplit=1)[1].strip()
    return token or None


def _non_empty_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _normalize_email(value: object) -> str | None:
    text = _non_empty_str(value)
    if text is None:
        return None
    return text.lower()


def _extract_claim_email(claims: dict[str, object]) -> str | None:
    for key in ("email", "email_address", "primary_email_address"):
        email = _normalize_email(claims.get(key))
        if email:
            return email
    return None


def _from_epoch_ms(value: object) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def _extract_clerk_profile(profile: ClerkUser | None) -> dict[str, object]:
    if profile is None:
        return {}

    primary_email_id = _non_empty_str(getattr(profile, "primary_email_address_id", None))
    emails = getattr(profile, "email_addresses", None)
    profile_email: str | None = None
    if isinstance(emails, list):
        fallback_email: str | None = None
        for item in emails:
            candidate = _normalize_email(getattr(item, "email_address", None))
            if not candidate:
                continue
            candidate_id = _non_empty_str(getattr(item, "id", None))
            if primary_email_id and candidate_id == primary_email_id:
                profile_email = candidate
                break
            if fallback_email is None:
                fallback_email = candidate
        if profile_email is None:
            profile_email = fallback_email

    return {
        "email": profile_email,
        "created_at": _from_epoch_ms(getattr(profile, "created_at", None)),
        "last_sign_in_at": _from_epoch_ms(getattr(profile, "last_sign_in_at", None)),
    }


def _normalize_clerk_server_url(raw: str) -> str | None:
    server_url = raw.strip().rstrip("/")
    if not server_url:
        return None
    if not server_url.endswith("/v1"):
        server_url = f"{server_url}/v1"
    return server_url


def _make_authenticate_request_options() -> AuthenticateRequestOptions:
    return AuthenticateRequestOptions(
        secret_key=settings.clerk_secret_key.strip(),
        clock_skew_in_ms=int(settings.clerk_leeway * 1000),
        accepts_token=["session_token"],
    )


async def _authenticate_clerk_request(request: Request) -> RequestState:
    # The SDK expects an httpx.Request; build one from the ASGI request.
    httpx_request = httpx.Request(
        request.method,
        str(request.url),
        headers=dict(request.headers),
    )
    options = _make_authenticate_request_options()
    sdk = Clerk(bearer_auth=options.secret_key or "")
    return await run_in_threadpool(sdk.authenticate_request, httpx_request, options)


def _clerk_client() -> Clerk:
    return Clerk(
        bearer_auth=settings.clerk_secret_key.strip(),
        server_url=_normalize_clerk_server_url(settings.clerk_api_url or ""),
        timeout_ms=CLERK_TIMEOUT_MS,
    )


async def _fetch_clerk_profile(clerk_user_id: str) -> dict[str, object]:
    clerk_user_id_log = clerk_user_id[-6:] if clerk_user_id else ""

    try:
        async with _clerk_client() as clerk:
            profile = await clerk.users.get_async(user_id=clerk_user_id)
        return _extract_clerk_profile(profile)
    except ClerkErrors as exc:
        logger.warning(
            "auth.clerk.profile.fetch_failed clerk_user_id=%s reason=clerk_errors error_type=%s",
            clerk_user_id_log,
            exc.__class__.__name__,
        )
    except SDKError as exc:
        logger.warning(
            "auth.clerk.profile.fetch_failed clerk_user_id=%s status=%s reason=sdk_error",
            clerk_user_id_log,
            exc.status_code,
        )
    except httpx.TimeoutException as exc:
        logger.warning(
            "auth.clerk.profile.fetch_failed clerk_user_id=%s reason=timeout error=%s",
            clerk_user_id_log,
            str(exc) or exc.__class__.__name__,
        )
    return {}


def _local_identity() -> Identity:
    return Identity(id=LOCAL_AUTH_USER_ID, email=LOCAL_AUTH_EMAIL)


def _resolve_local_auth_context(request: Request) -> AuthContext:
    token = _extract_bearer_token(request.headers.get("Authorization"))
    expected = settings.local_auth_token.strip()
    if token is None or not expected or not compare_digest(token, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return AuthContext(actor_type="user", identity=_local_identity())


def _parse_claims(claims: dict[str, object]) -> ClerkTokenPayload:
    return ClerkTokenPayload.model_validate(claims)


async def _resolve_clerk_auth_context(request: Request) -> AuthContext | None:
    request_state = await _authenticate_clerk_request(request)
    if request_state.status != AuthStatus.SIGNED_IN or not isinstance(request_state.payload, dict):
        return None
    claims: dict[str, object] = {str(k): v for k, v in request_state.payload.items()}
    try:
        payload = _parse_claims(claims)
    except ValidationError:
        return None
    if not payload.sub:
        return None
    identity = Identity(
        id=payload.sub,
        email=_extract_claim_email(claims),
        session_id=payload.sid,
    )
    return AuthContext(actor_type="user", identity=identity)


async def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = SECURITY_DEP,
) -> AuthContext:
    """Resolve required authenticated user context for the configured auth mode."""
    if settings.auth_mode == AuthMode.LOCAL:
        return _resolve_local_auth_context(request)

    ctx = await _resolve_clerk_auth_context(request)
    if ctx is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return ctx


async def load_profile(identity: Identity) -> Identity:
    """Fill in account timestamps (and email) from the auth provider."""
    if settings.auth_mode != AuthMode.CLERK:
        return identity
    profile = await _fetch_clerk_profile(identity.id)
    if not profile:
        return identity
    email = profile.get("email")
    created_at = profile.get("created_at")
    last_sign_in_at = profile.get("last_sign_in_at")
    return replace(
        identity,
        email=email if isinstance(email, str) else identity.email,
        created_at=created_at if isinstance(created_at, datetime) else identity.created_at,
        last_sign_in_at=(
            last_sign_in_at
            if isinstance(last_sign_in_at, datetime)
            else identity.last_sign_in_at
        ),
    )


async def sign_out(identity: Identity) -> None:
    """End the identity's session with the auth provider."""
    if settings.auth_mode != AuthMode.CLERK:
        logger.info("auth.sign_out.local user_id=%s", identity.id)
        return
    if not identity.session_id:
        logger.info("auth.sign_out.no_session user_id=%s", identity.id[-6:])
        return

    try:
        async with _clerk_client() as clerk:
            await clerk.sessions.revoke_async(session_id=identity.session_id)
        logger.info("auth.clerk.session.revoke user_id=%s", identity.id[-6:])
    except SDKError as exc:
        if exc.status_code == 404:
            logger.info("auth.clerk.session.revoke_missing user_id=%s", identity.id[-6:])
            return
        logger.warning(
            "auth.clerk.session.revoke_failed user_id=%s status=%s reason=sdk_error",
            identity.id[-6:],
            exc.status_code,
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to sign out with Clerk",
        ) from exc
    except (ClerkErrors, httpx.HTTPError) as exc:
        logger.warning(
            "auth.clerk.session.revoke_failed user_id=%s reason=%s",
            identity.id[-6:],
            exc.__class__.__name__,
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to sign out with Clerk",
        ) from exc
