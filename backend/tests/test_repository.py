import pytest
from sqlalchemy.orm.exc import StaleDataError

from jobmarket.errors import AuthorizationError, ConflictError, NotFoundError
from jobmarket.services.repository import (
    EntityRepository,
    _is_record_key,
    job_applicants_key,
    transactional,
    user_key,
)

JOB_FIELDS = {
    "title": "Head Cook",
    "description": "Prepare daily meals for a busy family restaurant kitchen.",
    "location": "Nairobi",
    "salary": "15000",
    "category": "Catering",
}

APPLICATION_FIELDS = {
    "motivation": "I am reliable and hardworking",
    "name": "Juma Seeker",
    "email": "seeker@example.com",
    "phone": "0712345678",
}


class FlakyRepository(EntityRepository):
    def __init__(self, db, failures):
        super().__init__(db)
        self.failures = failures
        self.calls = 0

    @transactional
    def touch(self, key):
        self.calls += 1
        self.kv.set(key, {"calls": self.calls})
        if self.calls <= self.failures:
            raise StaleDataError("row version changed")
        return self.calls


@pytest.fixture
def repo(db_session):
    repository = EntityRepository(db_session)
    repository.kv.set(user_key("emp"), {"id": "emp", "name": "Maria", "userType": "employer"})
    repository.kv.set(user_key("seek"), {"id": "seek", "name": "Juma", "userType": "jobseeker"})
    db_session.commit()
    return repository


class TestTransactional:
    def test_retries_after_stale_write(self, db_session):
        repository = FlakyRepository(db_session, failures=1)
        assert repository.touch("feedback:x") == 2
        assert repository.kv.get("feedback:x") == {"calls": 2}

    def test_gives_up_after_configured_attempts(self, db_session, feature_flags):
        feature_flags.write_retries = 2
        repository = FlakyRepository(db_session, failures=5)
        with pytest.raises(ConflictError):
            repository.touch("feedback:x")
        assert repository.calls == 2
        assert repository.kv.get("feedback:x") is None

    def test_domain_errors_roll_back(self, repo):
        with pytest.raises(NotFoundError):
            repo.submit_application("seek", "zzz", APPLICATION_FIELDS)
        assert repo.kv.get("user:seek:applications") is None


class TestRepository:
    def test_record_keys(self):
        assert _is_record_key("job:1", "job")
        assert not _is_record_key("job:1:applicants", "job")
        assert not _is_record_key("job:", "job")
        assert not _is_record_key("employer:1:jobs", "job")

    def test_submit_keeps_indexes_in_sync(self, repo):
        job = repo.create_job("emp", JOB_FIELDS)
        application = repo.submit_application("seek", job["id"], APPLICATION_FIELDS)

        assert repo.kv.get("employer:emp:jobs") == [job["id"]]
        assert repo.kv.get("user:seek:applications") == [application["id"]]
        assert repo.kv.get(job_applicants_key(job["id"])) == [application["id"]]
        assert repo.get_job(job["id"])["applicantCount"] == 1

    def test_company_join_is_not_stored(self, repo):
        job = repo.create_job("emp", JOB_FIELDS)
        assert job["company"] == "Maria"
        assert "company" not in repo.kv.get(f"job:{job['id']}")

    def test_missing_employer_is_anonymous(self, repo):
        repo.create_job("emp", JOB_FIELDS)
        repo.kv.delete(user_key("emp"))
        repo.db.commit()
        assert repo.list_jobs()[0]["company"] == "Anonymous Employer"

    def test_unknown_user_cannot_post(self, repo):
        with pytest.raises(AuthorizationError):
            repo.create_job("ghost", JOB_FIELDS)
