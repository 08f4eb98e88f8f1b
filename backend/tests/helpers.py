API = "/api/v1"

JOB_FIELDS = {
    "title": "Head Cook",
    "description": "Prepare daily meals for a busy family restaurant kitchen.",
    "location": "Nairobi",
    "salary": "15000",
    "category": "Catering",
}

MOTIVATION = "I am reliable and hardworking"


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def sign_up(client, email, user_type="jobseeker", name="Test User", **extra):
    body = {
        "email": email,
        "password": "secret-password",
        "name": name,
        "userType": user_type,
        "phone": "0712345678",
        "location": "Nairobi",
        **extra,
    }
    r = client.post(f"{API}/signup", json=body)
    assert r.status_code == 200, r.json()
    data = r.json()
    return data["userId"], data["accessToken"]


def employer(client, email="boss@example.com", **extra):
    return sign_up(client, email, user_type="employer", name="Maria Boss", **extra)


def seeker(client, email="seeker@example.com"):
    return sign_up(client, email, user_type="jobseeker", name="Juma Seeker")


def post_job(client, token, **overrides):
    r = client.post(f"{API}/jobs", json={**JOB_FIELDS, **overrides}, headers=auth(token))
    assert r.status_code == 200, r.json()
    return r.json()["job"]


def apply(client, token, job_id, **overrides):
    body = {
        "jobId": job_id,
        "motivation": MOTIVATION,
        "name": "Juma Seeker",
        "email": "seeker@example.com",
        "phone": "0712345678",
        **overrides,
    }
    return client.post(f"{API}/applications", json=body, headers=auth(token))
