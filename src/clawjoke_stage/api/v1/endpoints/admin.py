# src/clawjoke_stage/api/v1/endpoints/admin.py
"""Admin moderation endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from clawjoke_stage.api.v1.dependencies import AdminTokenDep, ModerationGateDep
from clawjoke_stage.schemas.admin import (
    AdminAccountPage,
    AdminAccountResponse,
    AdminCommentPage,
    AdminInitRequest,
    AdminJokePage,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminStatusResponse,
    ChangePasswordRequest,
    ToggleResponse,
)
from clawjoke_stage.schemas.joke import CommentResponse, JokeAdminResponse

router = APIRouter(prefix="/admin", tags=["admin"])

LimitQuery = Annotated[int, Query(ge=1, le=100)]
OffsetQuery = Annotated[int, Query(ge=0)]


@router.get("/status", response_model=AdminStatusResponse)
async def admin_status(gate: ModerationGateDep) -> AdminStatusResponse:
    return AdminStatusResponse(initialized=gate.is_initialized())


@router.post("/init", status_code=status.HTTP_201_CREATED, response_model=AdminStatusResponse)
async def admin_init(payload: AdminInitRequest, gate: ModerationGateDep) -> AdminStatusResponse:
    """Set the admin password. Allowed only while no admin exists."""
    gate.initialize(payload.password)
    return AdminStatusResponse(initialized=True)


@router.post("/login", response_model=AdminLoginResponse)
async def admin_login(payload: AdminLoginRequest, gate: ModerationGateDep) -> AdminLoginResponse:
    issued = gate.login(payload.username, payload.password)
    return AdminLoginResponse(token=issued.token, expires_at=issued.expires_at)


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    payload: ChangePasswordRequest,
    gate: ModerationGateDep,
    _token: AdminTokenDep,
) -> None:
    """Replace the admin password; every session, including this one, ends."""
    gate.change_password(payload.old_password, payload.new_password)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def admin_logout(gate: ModerationGateDep, token: AdminTokenDep) -> None:
    gate.logout(token)


@router.get("/users", response_model=AdminAccountPage)
async def list_users(
    gate: ModerationGateDep,
    _token: AdminTokenDep,
    search: str | None = None,
    limit: LimitQuery = 20,
    offset: OffsetQuery = 0,
) -> AdminAccountPage:
    page = gate.list_accounts(search, limit, offset)
    return AdminAccountPage(
        users=[AdminAccountResponse.model_validate(account) for account in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.post("/users/{uid}/toggle-ban", response_model=ToggleResponse)
async def toggle_ban(uid: str, gate: ModerationGateDep, _token: AdminTokenDep) -> ToggleResponse:
    account = gate.set_banned(uid)
    return ToggleResponse(id=account.id, banned=account.banned)


@router.get("/jokes", response_model=AdminJokePage)
async def list_jokes(
    gate: ModerationGateDep,
    _token: AdminTokenDep,
    search: str | None = None,
    hidden: bool = False,
    limit: LimitQuery = 20,
    offset: OffsetQuery = 0,
) -> AdminJokePage:
    """List every joke, including hidden ones; ``hidden=true`` lists only those."""
    page = gate.list_jokes(search, hidden_only=hidden, limit=limit, offset=offset)
    return AdminJokePage(
        jokes=[JokeAdminResponse.model_validate(joke) for joke in page.items],
        total=page.total,
        hidden_count=gate.hidden_count(),
        limit=page.limit,
        offset=page.offset,
    )


@router.post("/jokes/{joke_id}/toggle", response_model=ToggleResponse)
async def toggle_joke(joke_id: str, gate: ModerationGateDep, _token: AdminTokenDep) -> ToggleResponse:
    joke = gate.set_hidden(joke_id)
    return ToggleResponse(id=joke.id, hidden=joke.hidden)


@router.get("/comments", response_model=AdminCommentPage)
async def list_comments(
    gate: ModerationGateDep,
    _token: AdminTokenDep,
    search: str | None = None,
    limit: LimitQuery = 20,
    offset: OffsetQuery = 0,
) -> AdminCommentPage:
    page = gate.list_comments(search, limit, offset)
    return AdminCommentPage(
        comments=[CommentResponse.model_validate(comment) for comment in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )
