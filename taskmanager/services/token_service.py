"""Bearer token issuance, verification and revocation."""
from datetime import datetime, timezone
from typing import Optional
import uuid

import jwt
from sqlmodel import Session, select

from taskmanager.db.config import commit_or_fail
from taskmanager.errors import AuthenticationError
from taskmanager.models.user import User, UserToken

JWT_ALGORITHM = "HS256"


def create_jwt_token(user_id: str, secret: str) -> str:
    """Sign a token for a user. There is no exp claim: tokens live until revoked."""
    payload = {
        "sub": user_id,
        "iat": datetime.now(timezone.utc),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str, secret: str) -> str:
    """
    Check a token's signature and return the user id it carries.

    This does not check revocation; see find_user_for_token.

    Raises:
        AuthenticationError: If the token cannot be decoded or has no subject
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        raise AuthenticationError()

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError()
    return user_id


def issue_token(session: Session, user: User, secret: str) -> str:
    """Sign a new token for the user and append it to the user's sessions."""
    token = create_jwt_token(user.id, secret)
    session.add(UserToken(user_id=user.id, token=token))
    commit_or_fail(session)
    return token


def find_user_for_token(session: Session, user_id: str, token: str) -> Optional[User]:
    """Return the user only if it still holds this exact token."""
    statement = (
        select(User)
        .join(UserToken, UserToken.user_id == User.id)
        .where(User.id == user_id)
        .where(UserToken.token == token)
    )
    return session.exec(statement).first()


def list_tokens(session: Session, user_id: str) -> list[str]:
    """The user's tokens in issue order."""
    statement = select(UserToken.token).where(UserToken.user_id == user_id).order_by(UserToken.id)
    return list(session.exec(statement).all())


def delete_tokens(session: Session, user_id: str, token: Optional[str] = None) -> int:
    """Mark a user's token rows for deletion, all of them or one exact token. Does not commit."""
    statement = select(UserToken).where(UserToken.user_id == user_id)
    if token is not None:
        statement = statement.where(UserToken.token == token)
    rows = session.exec(statement).all()
    for row in rows:
        session.delete(row)
    return len(rows)


def revoke_token(session: Session, user: User, token: str) -> None:
    """Remove exactly one session."""
    delete_tokens(session, user.id, token)
    commit_or_fail(session)


def revoke_all_tokens(session: Session, user: User) -> None:
    delete_tokens(session, user.id)
    commit_or_fail(session)
