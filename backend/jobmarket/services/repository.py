"""Users, jobs and applications stored as JSON records in the key-value store.

Key layout::

    user:<id>                    profile
    job:<id>                     job posting
    application:<id>             application
    feedback:<id>                feedback entry
    employer:<id>:jobs           ids of jobs the employer posted
    user:<id>:applications       ids of applications the seeker submitted
    job:<id>:applicants          ids of applications submitted to the job

Index lists are kept in append order. Every list shown to a caller is
re-sorted by timestamp, so index order carries no meaning of its own.
"""

import functools
import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from jobmarket.config import settings
from jobmarket.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from jobmarket.services import advice
from jobmarket.services.identity_service import identity_service
from jobmarket.services.kv_store import KeyValueStore
from jobmarket.services.lifecycle import INITIAL_STATUS, ApplicationStatus, check_transition, is_final
from jobmarket.services.validation import (
    JOB_STATUSES,
    validate_application,
    validate_feedback,
    validate_job,
    validate_signup,
)

logger = logging.getLogger(__name__)

ANONYMOUS_EMPLOYER = "Anonymous Employer"

EDITABLE_JOB_FIELDS = (
    "title", "description", "location", "salary", "salaryPeriod", "category", "type", "requirements",
)
EDITABLE_APPLICATION_FIELDS = ("motivation", "name", "email", "phone")


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def job_key(job_id: str) -> str:
    return f"job:{job_id}"


def application_key(application_id: str) -> str:
    return f"application:{application_id}"


def feedback_key(feedback_id: str) -> str:
    return f"feedback:{feedback_id}"


def employer_jobs_key(employer_id: str) -> str:
    return f"employer:{employer_id}:jobs"


def user_applications_key(user_id: str) -> str:
    return f"user:{user_id}:applications"


def job_applicants_key(job_id: str) -> str:
    return f"job:{job_id}:applicants"


def _is_record_key(key: str, kind: str) -> bool:
    # "job:<id>" is a record, "job:<id>:applicants" is an index
    prefix, _, rest = key.partition(":")
    return prefix == kind and bool(rest) and ":" not in rest


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _newest_first(records: list[dict], field: str) -> list[dict]:
    return sorted(records, key=lambda r: r.get(field) or "", reverse=True)


def transactional(method):
    """Commit once per call; retry the whole call when a concurrent write wins.

    A stale row version or a racing insert of the same key rolls the session
    back and re-runs the operation against fresh reads.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        attempts = max(1, settings.write_retries)
        for attempt in range(1, attempts + 1):
            try:
                result = method(self, *args, **kwargs)
                self.db.commit()
                return result
            except (StaleDataError, IntegrityError) as exc:
                self.db.rollback()
                logger.warning(
                    "Concurrent write during %s (attempt %d/%d): %s",
                    method.__name__, attempt, attempts, exc,
                )
            except Exception:
                self.db.rollback()
                raise
        raise ConflictError("The record was changed by another request, please retry")

    return wrapper


class EntityRepository:
    def __init__(self, db: Session):
        self.db = db
        self.kv = KeyValueStore(db)

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def _load(self, key: str, label: str) -> dict:
        record = self.kv.get(key)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    def _load_job(self, job_id: str) -> dict:
        return self._load(job_key(job_id), "Job")

    def _load_application(self, application_id: str) -> dict:
        return self._load(application_key(application_id), "Application")

    def _require_role(self, user_id: str, user_type: str, message: str) -> dict:
        user = self.kv.get(user_key(user_id))
        if user is None or user.get("userType") != user_type:
            raise AuthorizationError(message)
        return user

    @staticmethod
    def _require_job_owner(job: dict, requester_id: str, message: str):
        if job.get("employerId") != requester_id:
            raise AuthorizationError(message)

    @staticmethod
    def _require_applicant(application: dict, requester_id: str, message: str):
        if application.get("userId") != requester_id:
            raise AuthorizationError(message)

    @staticmethod
    def company_name(employer: dict | None) -> str:
        employer = employer or {}
        return employer.get("businessName") or employer.get("name") or ANONYMOUS_EMPLOYER

    def _with_company(self, jobs: list[dict]) -> list[dict]:
        employers: dict[str, dict | None] = {}
        for job in jobs:
            employer_id = job.get("employerId")
            if employer_id not in employers:
                employers[employer_id] = self.kv.get(user_key(employer_id))
            job["company"] = self.company_name(employers[employer_id])
        return jobs

    def _resolve_applications(self, index_key: str) -> list[dict]:
        ids = self.kv.get(index_key) or []
        applications = self.kv.mget([application_key(i) for i in ids])
        return _newest_first(applications, "appliedDate")

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    @transactional
    def register_user(self, fields: dict[str, Any]) -> dict:
        """Create credentials and the matching profile in one transaction."""
        validate_signup(fields)
        user_id = identity_service.create_account(self.db, fields["email"], fields["password"])
        user = {
            "id": user_id,
            "email": fields["email"].strip().lower(),
            "name": fields["name"].strip(),
            "userType": fields["userType"],
            "phone": fields["phone"].strip(),
            "location": fields["location"].strip(),
            "businessName": fields.get("businessName") or None,
            "createdAt": _timestamp(),
        }
        self.kv.set(user_key(user_id), user)
        logger.info("Registered %s %s", user["userType"], user_id)
        return user

    def get_user(self, user_id: str) -> dict:
        return self._load(user_key(user_id), "User")

    # ------------------------------------------------------------------
    # jobs
    # ------------------------------------------------------------------

    @transactional
    def create_job(self, employer_id: str, fields: dict[str, Any]) -> dict:
        self._require_role(employer_id, "employer", "Please sign in as an employer to post jobs")
        job = {
            "id": str(uuid.uuid4()),
            "employerId": employer_id,
            "title": fields.get("title"),
            "description": fields.get("description"),
            "location": fields.get("location"),
            "salary": fields.get("salary"),
            "salaryPeriod": fields.get("salaryPeriod") or "monthly",
            "category": fields.get("category"),
            "type": fields.get("type") or "Full-time",
            "postedTime": _timestamp(),
            "status": "active",
            "applicantCount": 0,
            "requirements": fields.get("requirements") or [],
        }
        validate_job(job)

        self.kv.set(job_key(job["id"]), job)
        self.kv.append(employer_jobs_key(employer_id), job["id"])
        logger.info("Employer %s posted job %s", employer_id, job["id"])
        return self._with_company([job])[0]

    def list_jobs(self, search_text: str | None = None, category: str | None = None) -> list[dict]:
        jobs = [
            record
            for key, record in self.kv.get_by_prefix("job:")
            if _is_record_key(key, "job") and record.get("status") == "active"
        ]

        if search_text:
            needle = search_text.lower()
            jobs = [
                j for j in jobs
                if needle in (j.get("title") or "").lower()
                or needle in (j.get("description") or "").lower()
            ]
        if category and category != "All":
            jobs = [j for j in jobs if j.get("category") == category]

        return self._with_company(_newest_first(jobs, "postedTime"))

    def get_job(self, job_id: str) -> dict:
        job = self._load_job(job_id)
        employer = self.kv.get(user_key(job["employerId"])) or {}
        job["company"] = self.company_name(employer)
        job["employerEmail"] = employer.get("email")
        job["employerPhone"] = employer.get("phone")
        return job

    @transactional
    def update_job(self, job_id: str, requester_id: str, patch: dict[str, Any]) -> dict:
        job = self._load_job(job_id)
        self._require_job_owner(job, requester_id, "Unauthorized to edit this job")

        changes = {k: v for k, v in patch.items() if k in EDITABLE_JOB_FIELDS and v is not None}
        updated = {**job, **changes}
        validate_job(updated)

        self.kv.set(job_key(job_id), updated)
        return self._with_company([updated])[0]

    @transactional
    def set_job_status(self, job_id: str, requester_id: str, status: str) -> dict:
        if not settings.enable_job_status_changes:
            raise AuthorizationError("Changing job status is disabled")
        if status not in JOB_STATUSES:
            raise ValidationError("status", f"Invalid status. Must be one of: {', '.join(JOB_STATUSES)}")

        job = self._load_job(job_id)
        self._require_job_owner(job, requester_id, "Unauthorized to edit this job")
        job["status"] = status
        self.kv.set(job_key(job_id), job)
        logger.info("Job %s is now %s", job_id, status)
        return self._with_company([job])[0]

    def list_employer_jobs(self, employer_id: str) -> list[dict]:
        ids = self.kv.get(employer_jobs_key(employer_id)) or []
        jobs = self.kv.mget([job_key(i) for i in ids])
        for job in jobs:
            job["applicantCount"] = len(self.kv.get(job_applicants_key(job["id"])) or [])
        return self._with_company(_newest_first(jobs, "postedTime"))

    def employer_stats(self, employer_id: str) -> dict:
        jobs = self.list_employer_jobs(employer_id)
        applicant_ids: list[str] = []
        for job in jobs:
            applicant_ids.extend(self.kv.get(job_applicants_key(job["id"])) or [])
        applications = self.kv.mget([application_key(i) for i in applicant_ids])

        by_status = {s.value: 0 for s in ApplicationStatus}
        by_status.update(Counter(a.get("status") for a in applications))
        return {
            "totalJobs": len(jobs),
            "activeJobs": sum(1 for j in jobs if j.get("status") == "active"),
            "totalApplicants": len(applications),
            "byStatus": by_status,
            "acceptedCount": by_status[ApplicationStatus.ACCEPTED.value],
        }

    # ------------------------------------------------------------------
    # applications
    # ------------------------------------------------------------------

    def _has_applied(self, user_id: str, job_id: str) -> bool:
        ids = self.kv.get(user_applications_key(user_id)) or []
        existing = self.kv.mget([application_key(i) for i in ids])
        return any(a.get("jobId") == job_id for a in existing)

    @transactional
    def submit_application(self, applicant_id: str, job_id: str, fields: dict[str, Any]) -> dict:
        job = self._load_job(job_id)
        self._require_role(applicant_id, "jobseeker", "Please sign in as a job seeker to apply")
        validate_application(fields)
        if job.get("status") != "active":
            raise ConflictError("This job is no longer accepting applications")
        if settings.reject_duplicate_applications and self._has_applied(applicant_id, job_id):
            raise ConflictError("You have already applied for this job")

        employer = self.kv.get(user_key(job["employerId"]))
        application = {
            "id": str(uuid.uuid4()),
            "jobId": job_id,
            "userId": applicant_id,
            # Snapshots of the job as the applicant saw it; later job edits do not reach them
            "jobTitle": job["title"],
            "company": self.company_name(employer),
            "motivation": fields["motivation"],
            "name": fields["name"],
            "email": fields["email"],
            "phone": fields["phone"],
            "appliedDate": _timestamp(),
            "status": INITIAL_STATUS.value,
        }
        self.kv.set(application_key(application["id"]), application)
        self.kv.append(user_applications_key(applicant_id), application["id"])
        applicants = self.kv.append(job_applicants_key(job_id), application["id"])

        job["applicantCount"] = len(applicants)
        self.kv.set(job_key(job_id), job)
        logger.info("Application %s submitted to job %s", application["id"], job_id)
        return application

    def list_my_applications(self, user_id: str) -> list[dict]:
        return self._resolve_applications(user_applications_key(user_id))

    def list_applicants(self, job_id: str, requester_id: str) -> list[dict]:
        job = self._load_job(job_id)
        self._require_job_owner(job, requester_id, "Unauthorized to view applicants")
        return self._resolve_applications(job_applicants_key(job_id))

    @transactional
    def update_application(self, application_id: str, requester_id: str, patch: dict[str, Any]) -> dict:
        application = self._load_application(application_id)
        self._require_applicant(application, requester_id, "Unauthorized to edit this application")
        if is_final(application["status"]):
            raise ConflictError(f"Application is {application['status']} and can no longer be edited")

        changes = {k: v for k, v in patch.items() if k in EDITABLE_APPLICATION_FIELDS and v is not None}
        updated = {**application, **changes, "updatedAt": _timestamp()}
        validate_application(updated)

        self.kv.set(application_key(application_id), updated)
        return updated

    @transactional
    def update_application_status(self, application_id: str, requester_id: str, status: str) -> dict:
        application = self._load_application(application_id)
        job = self._load_job(application["jobId"])
        self._require_job_owner(job, requester_id, "Unauthorized to update this application")

        current = application["status"]
        target = check_transition(current, status, enforce=settings.enforce_status_transitions)
        if target.value == current:
            return application

        application["status"] = target.value
        application["updatedAt"] = _timestamp()
        self.kv.set(application_key(application_id), application)
        logger.info("Application %s moved %s -> %s", application_id, current, target.value)
        return application

    @transactional
    def withdraw_application(self, application_id: str, requester_id: str):
        if not settings.enable_application_withdrawal:
            raise AuthorizationError("Withdrawing applications is disabled")

        application = self._load_application(application_id)
        self._require_applicant(application, requester_id, "Unauthorized to withdraw this application")
        if application["status"] != ApplicationStatus.PENDING.value:
            raise ConflictError("Only pending applications can be withdrawn")

        job_id = application["jobId"]
        self.kv.delete(application_key(application_id))
        self.kv.remove(user_applications_key(requester_id), application_id)
        applicants = self.kv.remove(job_applicants_key(job_id), application_id)

        job = self.kv.get(job_key(job_id))
        if job is not None:
            job["applicantCount"] = len(applicants)
            self.kv.set(job_key(job_id), job)
        logger.info("Application %s withdrawn from job %s", application_id, job_id)

    def rejection_advice(self, application_id: str, requester_id: str) -> dict:
        application = self._load_application(application_id)
        self._require_applicant(application, requester_id, "Unauthorized to view this application")
        if application["status"] != ApplicationStatus.REJECTED.value:
            raise ConflictError("Advice is only available for rejected applications")

        job = self.kv.get(job_key(application["jobId"])) or {}
        result = advice.rejection_advice(job.get("category"))
        result["applicationId"] = application_id
        result["jobTitle"] = application["jobTitle"]
        return result

    # ------------------------------------------------------------------
    # feedback
    # ------------------------------------------------------------------

    @transactional
    def submit_feedback(self, fields: dict[str, Any], user_id: str | None = None) -> dict:
        validate_feedback(fields)
        feedback = {
            "id": str(uuid.uuid4()),
            "userId": user_id,
            "rating": fields["rating"],
            "message": fields["message"].strip(),
            "createdAt": _timestamp(),
        }
        self.kv.set(feedback_key(feedback["id"]), feedback)
        return feedback
