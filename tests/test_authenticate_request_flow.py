# ruff: noqa: INP001, SLF001
"""Identity resolution, profile loading, and sign-out for both auth modes."""

from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi import HTTPException

from taskflow.core import auth
from taskflow.core.auth_mode import AuthMode

LOCAL_TOKEN = "local-token-for-tests-0123456789-0123456789-0123456789"


def _request(headers: dict[str, str] | None = None) -> Any:
    return SimpleNamespace(headers=headers or {})


class _FakeSessions:
    def __init__(self) -> None:
        self.revoked: list[str] = []

    async def revoke_async(self, *, session_id: str) -> None:
        self.revoked.append(session_id)


class _FakeClerk:
    def __init__(self, sessions: _FakeSessions) -> None:
        self.sessions = sessions

    def __call__(self, **_kwargs: Any) -> _FakeClerk:
        return self

    async def __aenter__(self) -> _FakeClerk:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        return None


@pytest.mark.asyncio
async def test_get_auth_context_raises_401_when_clerk_signed_out(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.CLERK)
    monkeypatch.setattr(auth.settings, "clerk_secret_key", "sk_test_dummy")

    from clerk_backend_api.security.types import AuthStatus, RequestState

    async def _fake_authenticate(_request: Any) -> RequestState:
        return RequestState(status=AuthStatus.SIGNED_OUT)

    monkeypatch.setattr(auth, "_authenticate_clerk_request", _fake_authenticate)

    with pytest.raises(HTTPException) as excinfo:
        await auth.get_auth_context(request=_request(), credentials=None)

    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_get_auth_context_builds_identity_from_claims(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.CLERK)
    monkeypatch.setattr(auth.settings, "clerk_secret_key", "sk_test_dummy")

    from clerk_backend_api.security.types import AuthStatus, RequestState

    async def _fake_authenticate(_request: Any) -> RequestState:
        return RequestState(
            status=AuthStatus.SIGNED_IN,
            token="t",
            payload={"sub": "user_123", "sid": "sess_456", "email": " User@Example.com "},
        )

    monkeypatch.setattr(auth, "_authenticate_clerk_request", _fake_authenticate)

    ctx = await auth.get_auth_context(request=_request(), credentials=None)

    assert ctx.actor_type == "user"
    assert ctx.identity == auth.Identity(
        id="user_123",
        email="user@example.com",
        session_id="sess_456",
    )


@pytest.mark.asyncio
async def test_get_auth_context_rejects_claims_without_subject(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.CLERK)
    monkeypatch.setattr(auth.settings, "clerk_secret_key", "sk_test_dummy")

    from clerk_backend_api.security.types import AuthStatus, RequestState

    async def _fake_authenticate(_request: Any) -> RequestState:
        return RequestState(status=AuthStatus.SIGNED_IN, token="t", payload={"sid": "sess"})

    monkeypatch.setattr(auth, "_authenticate_clerk_request", _fake_authenticate)

    with pytest.raises(HTTPException) as excinfo:
        await auth.get_auth_context(request=_request(), credentials=None)

    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_local_mode_accepts_matching_bearer_token(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.LOCAL)
    monkeypatch.setattr(auth.settings, "local_auth_token", LOCAL_TOKEN)

    ctx = await auth.get_auth_context(
        request=_request({"Authorization": f"Bearer {LOCAL_TOKEN}"}),
        credentials=None,
    )

    assert ctx.identity is not None
    assert ctx.identity.id == auth.LOCAL_AUTH_USER_ID
    assert ctx.identity.email == auth.LOCAL_AUTH_EMAIL


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "Bearer wrong-token", "Basic abc", "Bearer "])
async def test_local_mode_rejects_missing_or_wrong_token(
    monkeypatch: pytest.MonkeyPatch,
    header: str | None,
) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.LOCAL)
    monkeypatch.setattr(auth.settings, "local_auth_token", LOCAL_TOKEN)
    headers = {"Authorization": header} if header is not None else {}

    with pytest.raises(HTTPException) as excinfo:
        await auth.get_auth_context(request=_request(headers), credentials=None)

    assert excinfo.value.status_code == 401


def test_extract_clerk_profile_prefers_primary_email_and_converts_timestamps() -> None:
    profile = SimpleNamespace(
        primary_email_address_id="idn_2",
        email_addresses=[
            SimpleNamespace(id="idn_1", email_address="first@example.com"),
            SimpleNamespace(id="idn_2", email_address="Primary@Example.com"),
        ],
        created_at=1_700_000_000_000,
        last_sign_in_at=None,
    )

    extracted = auth._extract_clerk_profile(profile)  # type: ignore[arg-type]

    assert extracted["email"] == "primary@example.com"
    assert extracted["created_at"] == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
    assert extracted["last_sign_in_at"] is None


@pytest.mark.asyncio
async def test_load_profile_fills_account_timestamps_in_clerk_mode(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.CLERK)
    created = datetime(2024, 1, 2, tzinfo=UTC)
    signed_in = datetime(2024, 5, 1, tzinfo=UTC)

    async def _fake_fetch(clerk_user_id: str) -> dict[str, object]:
        assert clerk_user_id == "user_123"
        return {"email": "user@example.com", "created_at": created, "last_sign_in_at": signed_in}

    monkeypatch.setattr(auth, "_fetch_clerk_profile", _fake_fetch)

    profile = await auth.load_profile(auth.Identity(id="user_123", session_id="sess_1"))

    assert profile.email == "user@example.com"
    assert profile.created_at == created
    assert profile.last_sign_in_at == signed_in
    assert profile.session_id == "sess_1"


@pytest.mark.asyncio
async def test_load_profile_keeps_identity_when_lookup_fails(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.CLERK)

    async def _fake_fetch(_clerk_user_id: str) -> dict[str, object]:
        return {}

    monkeypatch.setattr(auth, "_fetch_clerk_profile", _fake_fetch)
    identity = auth.Identity(id="user_123", email="user@example.com")

    assert await auth.load_profile(identity) is identity


@pytest.mark.asyncio
async def test_sign_out_revokes_clerk_session(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.CLERK)
    monkeypatch.setattr(auth.settings, "clerk_secret_key", "sk_test_dummy")
    sessions = _FakeSessions()
    monkeypatch.setattr(auth, "Clerk", _FakeClerk(sessions))

    await auth.sign_out(auth.Identity(id="user_123", session_id="sess_456"))

    assert sessions.revoked == ["sess_456"]


@pytest.mark.asyncio
async def test_sign_out_is_noop_in_local_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(auth.settings, "auth_mode", AuthMode.LOCAL)

    def _unexpected(**_kwargs: Any) -> None:  # pragma: no cover
        raise AssertionError("Clerk must not be contacted in local mode")

    monkeypatch.setattr(auth, "Clerk", _unexpected)

    await auth.sign_out(auth.Identity(id=auth.LOCAL_AUTH_USER_ID))
