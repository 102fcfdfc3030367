import logging
from typing import Annotated

from fastapi import APIRouter, Cookie, Depends
from fastapi.responses import JSONResponse

from secure_labs.types import LoginRequest, LoginResult, MeResponse
from secure_labs.web.dependencies import Dependencies, get_deps

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"
GENERIC_LOGIN_ERROR = "Invalid username or password"

router = APIRouter(prefix="/api")


def _unauthenticated(clear_cookie: bool) -> JSONResponse:
    response = JSONResponse(status_code=401, content=MeResponse(authenticated=False).model_dump(exclude_none=True))
    if clear_cookie:
        response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/me", response_model=MeResponse, response_model_exclude_none=True)
async def me(
    deps: Annotated[Dependencies, Depends(get_deps)],
    session: Annotated[str | None, Cookie()] = None,
):
    """Return the user behind the session cookie."""
    if not session:
        return _unauthenticated(clear_cookie=False)

    current = deps.session_store.get(session)
    if current is None:
        # Unknown or expired token
        return _unauthenticated(clear_cookie=True)

    user = deps.user_store.get(current.user_id)
    if user is None:
        deps.session_store.delete(session)
        return _unauthenticated(clear_cookie=True)

    return MeResponse(authenticated=True, username=user.username)


@router.post("/login", response_model=LoginResult, response_model_exclude_none=True)
def login(credentials: LoginRequest, deps: Annotated[Dependencies, Depends(get_deps)]):
    """Check credentials and start a session.

    Unknown users and wrong passwords get the same response so the endpoint
    does not reveal which usernames exist.
    """
    user = deps.user_store.authenticate(credentials.username, credentials.password)
    if user is None:
        logger.info("Failed login attempt")
        return JSONResponse(
            status_code=401,
            content=LoginResult(success=False, message=GENERIC_LOGIN_ERROR).model_dump(exclude_none=True),
        )

    token = deps.session_store.create(user.id)
    logger.info(f"User {user.id} logged in")

    response = JSONResponse(content=LoginResult(success=True, token=token).model_dump(exclude_none=True))
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=deps.session_store.ttl,
        httponly=True,
        secure=False,  # the lab runs over plain http on localhost
        samesite="strict",
    )
    return response


@router.post("/logout")
async def logout(
    deps: Annotated[Dependencies, Depends(get_deps)],
    session: Annotated[str | None, Cookie()] = None,
):
    """End the current session, if any."""
    if session:
        deps.session_store.delete(session)

    response = JSONResponse(content={"success": True})
    response.delete_cookie(SESSION_COOKIE)
    return response
