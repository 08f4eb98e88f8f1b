from jobmarket.schemas.common import CamelModel, SuccessResponse


class FeedbackCreate(CamelModel):
    rating: int
    message: str


class FeedbackResponse(CamelModel):
    id: str
    user_id: str | None = None
    rating: int
    message: str
    created_at: str


class FeedbackEnvelope(SuccessResponse):
    feedback: FeedbackResponse
