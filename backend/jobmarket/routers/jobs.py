from fastapi import APIRouter, Depends

from jobmarket.dependencies import get_repository, require_user
from jobmarket.schemas.application import ApplicantListEnvelope
from jobmarket.schemas.job import JobCreate, JobEnvelope, JobListEnvelope, JobStatusUpdate, JobUpdate
from jobmarket.services.repository import EntityRepository

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobEnvelope)
async def create_job(
    req: JobCreate,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    job = repo.create_job(user_id, req.model_dump(by_alias=True, exclude_none=True))
    return {"job": job}


@router.get("", response_model=JobListEnvelope)
async def list_jobs(
    search: str | None = None,
    category: str | None = None,
    repo: EntityRepository = Depends(get_repository),
):
    return {"jobs": repo.list_jobs(search, category)}


@router.get("/{job_id}", response_model=JobEnvelope)
async def get_job(job_id: str, repo: EntityRepository = Depends(get_repository)):
    return {"job": repo.get_job(job_id)}


@router.put("/{job_id}", response_model=JobEnvelope)
async def update_job(
    job_id: str,
    req: JobUpdate,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    patch = req.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    return {"job": repo.update_job(job_id, user_id, patch)}


@router.put("/{job_id}/status", response_model=JobEnvelope)
async def set_job_status(
    job_id: str,
    req: JobStatusUpdate,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    return {"job": repo.set_job_status(job_id, user_id, req.status)}


@router.get("/{job_id}/applicants", response_model=ApplicantListEnvelope)
async def list_applicants(
    job_id: str,
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    return {"applicants": repo.list_applicants(job_id, user_id)}
