from pydantic import field_validator

from jobmarket.schemas.common import CamelModel, SuccessResponse


def _salary_as_text(value):
    # Clients send either "5000" or 5000; records keep the text form
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class JobCreate(CamelModel):
    title: str
    description: str
    location: str
    salary: str
    category: str
    salary_period: str | None = None
    type: str | None = None
    requirements: list[str] | None = None

    @field_validator("salary", mode="before")
    @classmethod
    def salary_as_text(cls, value):
        return _salary_as_text(value)


class JobUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    location: str | None = None
    salary: str | None = None
    salary_period: str | None = None
    category: str | None = None
    type: str | None = None
    requirements: list[str] | None = None

    @field_validator("salary", mode="before")
    @classmethod
    def salary_as_text(cls, value):
        return _salary_as_text(value)


class JobStatusUpdate(CamelModel):
    status: str


class JobResponse(CamelModel):
    id: str
    employer_id: str
    title: str
    description: str
    location: str
    salary: str
    salary_period: str
    category: str
    type: str
    posted_time: str
    status: str
    applicant_count: int = 0
    requirements: list[str] = []
    company: str | None = None
    employer_email: str | None = None
    employer_phone: str | None = None


class JobEnvelope(SuccessResponse):
    job: JobResponse


class JobListEnvelope(SuccessResponse):
    jobs: list[JobResponse]


class EmployerStats(CamelModel):
    total_jobs: int
    active_jobs: int
    total_applicants: int
    by_status: dict[str, int]
    accepted_count: int


class EmployerStatsEnvelope(SuccessResponse):
    stats: EmployerStats
