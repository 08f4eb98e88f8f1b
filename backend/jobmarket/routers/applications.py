from fastapi import APIRouter, Depends

from jobmarket.dependencies import get_repository, require_user
from jobmarket.schemas.application import (
    AdviceEnvelope,
    ApplicationCreate,
    ApplicationEnvelope,
    ApplicationListEnvelope,
    ApplicationStatusUpdate,
    ApplicationUpdate,
)
from jobmarket.schemas.common import SuccessResponse
from jobmarket.services.repository import EntityRepository

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=ApplicationEnvelope)
async def submit_application(
    req: ApplicationCreate,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    fields = req.model_dump(by_alias=True, exclude={"job_id"})
    return {"application": repo.submit_application(user_id, req.job_id, fields)}


@router.get("", response_model=ApplicationListEnvelope)
async def list_my_applications(
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    return {"applications": repo.list_my_applications(user_id)}


@router.put("/{application_id}", response_model=ApplicationEnvelope)
async def update_application(
    application_id: str,
    req: ApplicationUpdate,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    patch = req.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    return {"application": repo.update_application(application_id, user_id, patch)}


@router.put("/{application_id}/status", response_model=ApplicationEnvelope)
async def update_application_status(
    application_id: str,
    req: ApplicationStatusUpdate,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    return {"application": repo.update_application_status(application_id, user_id, req.status)}


@router.delete("/{application_id}", response_model=SuccessResponse)
async def withdraw_application(
    application_id: str,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    repo.withdraw_application(application_id, user_id)
    return {}


@router.get("/{application_id}/advice", response_model=AdviceEnvelope)
async def rejection_advice(
    application_id: str,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    return {"advice": repo.rejection_advice(application_id, user_id)}
