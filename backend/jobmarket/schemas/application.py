from jobmarket.schemas.common import CamelModel, SuccessResponse


class ApplicationCreate(CamelModel):
    job_id: str
    motivation: str
    name: str
    email: str
    phone: str


class ApplicationUpdate(CamelModel):
    motivation: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class ApplicationStatusUpdate(CamelModel):
    status: str


class ApplicationResponse(CamelModel):
    id: str
    job_id: str
    user_id: str
    job_title: str
    company: str
    motivation: str
    name: str
    email: str
    phone: str
    applied_date: str
    status: str
    updated_at: str | None = None


class ApplicationEnvelope(SuccessResponse):
    application: ApplicationResponse


class ApplicationListEnvelope(SuccessResponse):
    applications: list[ApplicationResponse]


class ApplicantListEnvelope(SuccessResponse):
    applicants: list[ApplicationResponse]


class RejectionAdvice(CamelModel):
    application_id: str
    job_title: str
    category: str | None = None
    tip: str
    message: str


class AdviceEnvelope(SuccessResponse):
    advice: RejectionAdvice
