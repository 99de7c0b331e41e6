"""Account endpoints backed by the session cookie."""

from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool

from nutrilens.api.deps import get_container, login_session, require_user
from nutrilens.api.schemas import (
    LoginRequest,
    MessageOut,
    ProfileUpdateRequest,
    RegisterRequest,
    UserOut,
)
from nutrilens.containers import AppContainer
from nutrilens.domain.users import UserRecord

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    container: AppContainer = Depends(get_container),
) -> UserOut:
    """Create an account and sign it in."""
    user = await run_in_threadpool(
        container.user_service.register,
        username=body.username,
        password=body.password,
        confirm_password=body.confirm_password,
        display_name=body.display_name,
        profile_picture=body.profile_picture,
    )
    login_session(request, user)
    return UserOut.from_record(user)


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    container: AppContainer = Depends(get_container),
) -> UserOut:
    """Check credentials and start a session."""
    user = await run_in_threadpool(
        container.user_service.authenticate, body.username, body.password
    )
    login_session(request, user)
    return UserOut.from_record(user)


@router.post("/logout", dependencies=[Depends(require_user)])
async def logout(request: Request) -> MessageOut:
    """End the current session."""
    request.session.clear()
    return MessageOut(message="Logged out successfully")


@router.get("/me")
async def me(user: UserRecord = Depends(require_user)) -> UserOut:
    """Return the signed-in user."""
    return UserOut.from_record(user)


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    user: UserRecord = Depends(require_user),
    container: AppContainer = Depends(get_container),
) -> UserOut:
    """Update display name and/or profile picture."""
    updated = container.user_service.update_profile(
        user.id, body.model_dump(exclude_unset=True)
    )
    return UserOut.from_record(updated)
