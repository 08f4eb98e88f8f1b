from fastapi import APIRouter, Depends

from jobmarket.dependencies import get_repository, optional_user
from jobmarket.schemas.feedback import FeedbackCreate, FeedbackEnvelope
from jobmarket.services.repository import EntityRepository

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackEnvelope)
async def submit_feedback(
    req: FeedbackCreate,
    user_id: str | None = Depends(optional_user),
    repo: EntityRepository = Depends(get_repository),
):
    return {"feedback": repo.submit_feedback(req.model_dump(), user_id)}
