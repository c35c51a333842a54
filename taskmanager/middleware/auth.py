"""Bearer token authentication dependency for FastAPI."""
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlmodel import Session

from taskmanager.db.config import get_session
from taskmanager.errors import AuthenticationError
from taskmanager.models.user import User
from taskmanager.services.token_service import find_user_for_token, verify_token


@dataclass
class AuthContext:
    """The authenticated user and the token it presented on this request."""
    user: User
    token: str


async def get_current_user(
    request: Request,
    session: Session = Depends(get_session),
) -> AuthContext:
    """
    Resolve the Authorization header to a user that still holds the token.

    Args:
        request: FastAPI request object to extract Authorization header
        session: Database session

    Returns:
        AuthContext with the user and the presented token

    Raises:
        AuthenticationError: For a missing header, a bad signature, a revoked
            token or a deleted user, all with the same generic message
    """
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationError()

    token = auth_header[7:].strip()  # Remove "Bearer " prefix
    user_id = verify_token(token, request.app.state.settings.jwt_secret)

    # A valid signature is not enough: logout may have revoked the token
    user = find_user_for_token(session, user_id, token)
    if user is None:
        raise AuthenticationError()

    return AuthContext(user=user, token=token)
