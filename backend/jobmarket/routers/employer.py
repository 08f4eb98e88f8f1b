from fastapi import APIRouter, Depends

from jobmarket.dependencies import get_repository, require_user
from jobmarket.schemas.job import EmployerStatsEnvelope, JobListEnvelope
from jobmarket.services.repository import EntityRepository

router = APIRouter(prefix="/employer", tags=["employer"])


@router.get("/jobs", response_model=JobListEnvelope)
async def employer_jobs(
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    # Counts come from the applicant indexes, not the cached field on the job
    return {"jobs": repo.list_employer_jobs(user_id)}


@router.get("/stats", response_model=EmployerStatsEnvelope)
async def employer_stats(
    user_id: str = Depends(require_user),
    repo: EntityRepository = Depends(get_repository),
):
    return {"stats": repo.employer_stats(user_id)}
