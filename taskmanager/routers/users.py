"""User router: registration, sessions, profile and avatar."""
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Body, Depends, File, Request, Response, UploadFile, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from taskmanager.db.config import get_session
from taskmanager.errors import NotFound, UploadRejected, ValidationFailed
from taskmanager.middleware.auth import AuthContext, get_current_user
from taskmanager.schemas.updates import parse_update
from taskmanager.schemas.user import (
    USER_UPDATABLE_FIELDS,
    AuthResponse,
    LoginRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from taskmanager.services import avatar_service, token_service, user_service
from taskmanager.services.notification_service import Mailer
from taskmanager.utils.logger import get_logger

router = APIRouter(tags=["Users"])
logger = get_logger(__name__)


def get_mailer(request: Request) -> Mailer:
    """Dependency for the application's mail dispatcher."""
    return request.app.state.mailer


def get_jwt_secret(request: Request) -> str:
    return request.app.state.settings.jwt_secret


@router.post("/users", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
    secret: str = Depends(get_jwt_secret),
):
    """Create an account and log it in."""
    user = await user_service.create_user(session, payload)
    token = token_service.issue_token(session, user, secret)

    background_tasks.add_task(mailer.send_welcome_email, user.email, user.name)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/users/login", response_model=AuthResponse)
async def login(
    body: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    secret: str = Depends(get_jwt_secret),
):
    """Exchange credentials for an additional token; existing sessions stay valid."""
    try:
        payload = LoginRequest.model_validate(body)
    except ValidationError as e:
        raise ValidationFailed(user_service.LOGIN_FAILED) from e

    user = await user_service.find_by_credentials(session, payload.email, payload.password)
    token = token_service.issue_token(session, user, secret)
    logger.info("User logged in", user_id=user.id)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/users/logout")
async def logout(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Revoke the token used for this request only."""
    token_service.revoke_token(session, auth.user, auth.token)
    logger.info("User logged out", user_id=auth.user.id)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/users/logout-all")
async def logout_all(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Revoke every token of the user."""
    token_service.revoke_all_tokens(session, auth.user)
    logger.info("User logged out everywhere", user_id=auth.user.id)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/users/profile", response_model=UserResponse)
async def read_profile(auth: AuthContext = Depends(get_current_user)):
    return auth.user


@router.patch("/users/profile", response_model=UserResponse)
async def update_profile(
    body: Dict[str, Any] = Body(...),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Update name, email, password or age. Any other key rejects the whole request."""
    changes = parse_update(body, USER_UPDATABLE_FIELDS, UserUpdate)
    return await user_service.update_user(session, auth.user, changes)


@router.delete("/users/profile", response_model=UserResponse)
async def delete_profile(
    background_tasks: BackgroundTasks,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
):
    """Delete the account and everything it owns."""
    deleted = UserResponse.model_validate(auth.user)
    user_service.delete_user(session, auth.user)

    background_tasks.add_task(mailer.send_goodbye_email, deleted.email, deleted.name)
    return deleted


@router.post("/users/profile/avatar", response_class=PlainTextResponse)
async def upload_avatar(
    avatar: UploadFile = File(...),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Store a jpg/jpeg/png picture as a 250x250 PNG."""
    # One byte over the limit is enough to know the file is too large
    data = await avatar.read(avatar_service.MAX_AVATAR_BYTES + 1)
    try:
        avatar_service.check_upload(avatar.filename, len(data))
        png = await run_in_threadpool(avatar_service.normalize_avatar, data)
    except UploadRejected as e:
        logger.info("Avatar rejected", user_id=auth.user.id, filename=avatar.filename, reason=e.message)
        raise

    user_service.set_avatar(session, auth.user, png)
    return PlainTextResponse("Success")


@router.delete("/users/profile/avatar", response_class=PlainTextResponse)
async def delete_avatar(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user_service.set_avatar(session, auth.user, None)
    return PlainTextResponse("Success")


@router.get("/users/avatar/{user_id}")
async def read_avatar(user_id: str, session: Session = Depends(get_session)):
    """Public: serve a user's avatar as PNG bytes."""
    user = user_service.get_user(session, user_id)
    if not user or not user.avatar:
        raise NotFound("User or avatar not found")
    return Response(content=user.avatar, media_type="image/png")
