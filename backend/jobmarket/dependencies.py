from fastapi import Depends, Header
from sqlalchemy.orm import Session

from jobmarket.config import settings
from jobmarket.database import get_db
from jobmarket.errors import AuthenticationError
from jobmarket.services.identity_service import identity_service
from jobmarket.services.repository import EntityRepository


def _bearer_token(authorization: str | None) -> str | None:
    # The scheme name is case-insensitive
    if not authorization or authorization[:7].lower() != "bearer ":
        return None
    return authorization[7:].strip() or None


async def require_token(authorization: str | None = Header(None)) -> str:
    token = _bearer_token(authorization)
    # The public anon key identifies nobody
    if token is None or token == settings.public_anon_key:
        raise AuthenticationError("Unauthorized - please sign in")
    return token


async def require_user(token: str = Depends(require_token)) -> str:
    user_id = identity_service.verify(token)
    if user_id is None:
        raise AuthenticationError("Invalid or expired session")
    return user_id


async def optional_user(authorization: str | None = Header(None)) -> str | None:
    token = _bearer_token(authorization)
    if token is None or token == settings.public_anon_key:
        return None
    return identity_service.verify(token)


def get_repository(db: Session = Depends(get_db)) -> EntityRepository:
    return EntityRepository(db)
