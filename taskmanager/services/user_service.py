"""User service: registration, credentials, profile changes and cascading deletion.

Store side effects that would otherwise hide in ORM lifecycle hooks (hashing
before save, removing owned tasks before delete) are plain functions here and
are called explicitly by the routers.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool

from taskmanager.db.config import commit_or_fail
from taskmanager.errors import StoreFailure, ValidationFailed
from taskmanager.models.task import Task
from taskmanager.models.user import User
from taskmanager.schemas.user import UserCreate, UserUpdate
from taskmanager.services.security import hash_password, verify_password
from taskmanager.services.token_service import delete_tokens
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)

LOGIN_FAILED = "Unable to login"
EMAIL_TAKEN = "Email is already in use"


def get_user(session: Session, user_id: str) -> Optional[User]:
    return session.get(User, user_id)


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    statement = select(User).where(User.email == email.strip().lower())
    return session.exec(statement).first()


async def apply_password(user: User, password: str) -> None:
    """Hash a plaintext password onto the user. Call before every save that changes it."""
    user.hashed_password = await run_in_threadpool(hash_password, password)


def _save(session: Session, user: User) -> User:
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Unique email index lost a race with another writer
        session.rollback()
        raise ValidationFailed(EMAIL_TAKEN)
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreFailure(str(e)) from e
    session.refresh(user)
    return user


async def create_user(session: Session, data: UserCreate) -> User:
    """Validate uniqueness, hash the password and persist a new user."""
    if get_user_by_email(session, data.email):
        raise ValidationFailed(EMAIL_TAKEN)

    user = User(name=data.name, email=data.email, age=data.age, hashed_password="")
    await apply_password(user, data.password)
    user = _save(session, user)
    logger.info("User registered", user_id=user.id)
    return user


async def find_by_credentials(session: Session, email: str, password: str) -> User:
    """
    Resolve a user from login credentials.

    Raises:
        ValidationFailed: With the same message whether the email is unknown
            or the password is wrong
    """
    user = get_user_by_email(session, email)
    if not user:
        logger.info("Login failed")
        raise ValidationFailed(LOGIN_FAILED)

    matches = await run_in_threadpool(verify_password, password, user.hashed_password)
    if not matches:
        logger.info("Login failed")
        raise ValidationFailed(LOGIN_FAILED)
    return user


async def update_user(session: Session, user: User, changes: UserUpdate) -> User:
    """Apply the fields present in the update, field by field."""
    fields = changes.model_fields_set

    if "email" in fields and changes.email != user.email:
        other = get_user_by_email(session, changes.email)
        if other and other.id != user.id:
            raise ValidationFailed(EMAIL_TAKEN)
        user.email = changes.email
    if "name" in fields:
        user.name = changes.name
    if "age" in fields:
        user.age = changes.age
    if "password" in fields:
        await apply_password(user, changes.password)

    user.updated_at = datetime.now(timezone.utc)
    return _save(session, user)


def delete_user(session: Session, user: User) -> None:
    """Delete the user together with every task and token it owns, in one commit."""
    tasks = session.exec(select(Task).where(Task.owner == user.id)).all()
    for task in tasks:
        session.delete(task)
    delete_tokens(session, user.id)
    try:
        # Children go first so the foreign keys never dangle
        session.flush()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreFailure(str(e)) from e
    session.delete(user)
    commit_or_fail(session)
    logger.info("User deleted", user_id=user.id, tasks_removed=len(tasks))


def set_avatar(session: Session, user: User, png: Optional[bytes]) -> None:
    """Store a normalized avatar, or clear it with None."""
    user.avatar = png
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    commit_or_fail(session)
