from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from jobmarket.database import get_db
from jobmarket.dependencies import get_repository, require_token, require_user
from jobmarket.schemas.auth import (
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
)
from jobmarket.schemas.common import SuccessResponse
from jobmarket.services.identity_service import identity_service
from jobmarket.services.repository import EntityRepository

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=SignUpResponse)
async def sign_up(req: SignUpRequest, repo: EntityRepository = Depends(get_repository)):
    user = repo.register_user(req.model_dump(by_alias=True))
    token = identity_service.start_session(user["id"])
    return {"user": user, "user_id": user["id"], "access_token": token}


@router.post("/signin", response_model=SignInResponse)
async def sign_in(
    req: SignInRequest,
    request: Request,
    db: Session = Depends(get_db),
    repo: EntityRepository = Depends(get_repository),
):
    client_host = request.client.host if request.client else "unknown"
    user_id, token = identity_service.sign_in(
        db, req.email, req.password, throttle_key=f"signin:{client_host}:{req.email.strip().lower()}"
    )
    return {"user": repo.get_user(user_id), "access_token": token}


@router.get("/session", response_model=SessionResponse)
async def session(user_id: str = Depends(require_user), repo: EntityRepository = Depends(get_repository)):
    return {"user": repo.get_user(user_id)}


@router.post("/signout", response_model=SuccessResponse)
async def sign_out(token: str = Depends(require_token), _user_id: str = Depends(require_user)):
    identity_service.sign_out(token)
    return {}
