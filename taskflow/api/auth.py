"""Identity endpoints backing the settings screen and sign-out."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from taskflow.api.deps import IDENTITY_DEP
from taskflow.core.auth import load_profile, sign_out
from taskflow.schemas.auth import IdentityRead
from taskflow.schemas.common import OkResponse

if TYPE_CHECKING:
    from taskflow.core.auth import Identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=IdentityRead)
async def read_me(identity: Identity = IDENTITY_DEP) -> IdentityRead:
    """Return the signed-in user's id, email, and account timestamps."""
    profile = await load_profile(identity)
    return IdentityRead(
        id=profile.id,
        email=profile.email,
        created_at=profile.created_at,
        last_sign_in_at=profile.last_sign_in_at,
    )


@router.post("/sign-out", response_model=OkResponse)
async def sign_out_current(identity: Identity = IDENTITY_DEP) -> OkResponse:
    """End the caller's session with the auth provider."""
    await sign_out(identity)
    return OkResponse()
