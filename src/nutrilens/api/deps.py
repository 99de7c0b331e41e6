"""Request dependencies shared by routers."""

from fastapi import Depends, Request

from nutrilens.containers import AppContainer
from nutrilens.domain.users import UserRecord
from nutrilens.errors import auth_error

SESSION_USER_KEY = "user_id"


def get_container(request: Request) -> AppContainer:
    """Return the dependency container attached to the app."""
    return request.app.state.container


def require_user(
    request: Request, container: AppContainer = Depends(get_container)
) -> UserRecord:
    """Return the signed-in user or fail with 401."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise auth_error()
    user = container.user_service.get_user(int(user_id))
    if user is None:
        request.session.clear()
        raise auth_error()
    return user


def login_session(request: Request, user: UserRecord) -> None:
    """Bind the session cookie to the user."""
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
