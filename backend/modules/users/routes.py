"""
User-related endpoints.

Provides endpoints for the current user's profile, password and sessions.
All of them require a bearer token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_session_store, get_user_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser, CamelModel
from modules.sessions.interfaces import ISessionStore
from modules.sessions.models import SessionInfo

from .exceptions import UserNotFoundError
from .interfaces import IUserService
from .models import ChangePasswordRequest, ProfileUpdateRequest, PublicUser

router = APIRouter()


class UserResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: PublicUser


class SessionListData(CamelModel):
    sessions: list[SessionInfo]


class SessionListResponse(CamelModel):
    success: bool = True
    data: SessionListData


class SessionsDeletedData(CamelModel):
    deleted: int


class SessionsDeletedResponse(CamelModel):
    success: bool = True
    message: str
    data: SessionsDeletedData


def _current_session_id(request: Request) -> Optional[str]:
    session = getattr(request.state, "session", None)
    return session.session_id if session is not None else None


@router.get("/me", response_model=UserResponse, response_model_exclude_none=True)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    users: IUserService = Depends(get_user_service),
) -> UserResponse:
    """
    Get the current user's profile.

    Requires authentication.
    """
    record = await users.get_by_id(user.id)
    if record is None:
        raise UserNotFoundError("User not found")
    return UserResponse(data=record.to_public())


@router.patch("/me", response_model=UserResponse, response_model_exclude_none=True)
async def update_current_user_profile(
    body: ProfileUpdateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    users: IUserService = Depends(get_user_service),
) -> UserResponse:
    updated = await users.update_profile(user.id, body.model_dump(exclude_none=True))
    return UserResponse(message="Profile updated successfully", data=updated.to_public())


@router.post("/me/password", response_model=UserResponse, response_model_exclude_none=True)
async def change_password(
    body: ChangePasswordRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    users: IUserService = Depends(get_user_service),
) -> UserResponse:
    updated = await users.change_password(user.id, body.current_password, body.new_password)
    return UserResponse(message="Password updated successfully", data=updated.to_public())


@router.get("/me/sessions", response_model=SessionListResponse)
async def list_sessions(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: ISessionStore = Depends(get_session_store),
) -> SessionListResponse:
    """List the caller's live sessions, most recently active first."""
    current = _current_session_id(request)
    live = await sessions.list_for_user(user.id)
    return SessionListResponse(data=SessionListData(sessions=[
        SessionInfo(
            session_id=s.session_id,
            last_activity=s.last_activity,
            expires_at=s.expires_at,
            user_agent=s.user_agent,
            ip=s.ip,
            created_at=s.created_at,
            current=s.session_id == current,
        )
        for s in live
    ]))


@router.delete("/me/sessions", response_model=SessionsDeletedResponse)
async def delete_all_sessions(
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: ISessionStore = Depends(get_session_store),
) -> SessionsDeletedResponse:
    """Log out everywhere."""
    count = await sessions.delete_all_for_user(user.id)
    return SessionsDeletedResponse(
        message="All sessions ended",
        data=SessionsDeletedData(deleted=count),
    )
