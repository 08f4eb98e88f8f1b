from helpers import API, auth, employer, seeker, sign_up


class TestSignUp:
    def test_signup_returns_profile_and_token(self, client):
        r = client.post(f"{API}/signup", json={
            "email": "Maria@Example.com",
            "password": "secret-password",
            "name": "Maria",
            "userType": "employer",
            "phone": "0712345678",
            "location": "Mombasa",
            "businessName": "Maria's Kitchen",
        })
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["userId"] == data["user"]["id"]
        assert len(data["accessToken"]) == 64  # 32 bytes hex
        assert data["user"]["email"] == "maria@example.com"
        assert data["user"]["userType"] == "employer"
        assert data["user"]["businessName"] == "Maria's Kitchen"
        assert "password" not in data["user"]

    def test_signup_rejects_duplicate_email(self, client):
        seeker(client, "dup@example.com")
        r = client.post(f"{API}/signup", json={
            "email": "DUP@example.com",
            "password": "secret-password",
            "name": "Other",
            "userType": "jobseeker",
            "phone": "0712345678",
            "location": "Nairobi",
        })
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert r.json()["field"] == "email"

    def test_signup_rejects_unknown_user_type(self, client):
        r = client.post(f"{API}/signup", json={
            "email": "admin@example.com",
            "password": "secret-password",
            "name": "Admin",
            "userType": "admin",
            "phone": "0712345678",
            "location": "Nairobi",
        })
        assert r.status_code == 400
        assert r.json()["field"] == "userType"

    def test_signup_rejects_short_name(self, client):
        r = client.post(f"{API}/signup", json={
            "email": "x@example.com",
            "password": "secret-password",
            "name": "X",
            "userType": "jobseeker",
            "phone": "0712345678",
            "location": "Nairobi",
        })
        assert r.status_code == 400
        assert r.json()["field"] == "name"

    def test_signup_missing_fields(self, client):
        r = client.post(f"{API}/signup", json={"email": "x@example.com"})
        assert r.status_code == 400
        assert r.json()["success"] is False


class TestSignIn:
    def test_signin(self, client):
        user_id, _ = seeker(client)
        r = client.post(f"{API}/signin", json={
            "email": "seeker@example.com",
            "password": "secret-password",
        })
        assert r.status_code == 200
        data = r.json()
        assert data["user"]["id"] == user_id
        assert data["accessToken"]

    def test_signin_wrong_password(self, client):
        seeker(client)
        r = client.post(f"{API}/signin", json={
            "email": "seeker@example.com",
            "password": "wrong-password",
        })
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid login credentials"

    def test_signin_unknown_email(self, client):
        r = client.post(f"{API}/signin", json={
            "email": "nobody@example.com",
            "password": "secret-password",
        })
        assert r.status_code == 401

    def test_signin_throttled_after_repeated_failures(self, client):
        seeker(client)
        for _ in range(3):
            r = client.post(f"{API}/signin", json={
                "email": "seeker@example.com",
                "password": "wrong-password",
            })
            assert r.status_code == 401

        r = client.post(f"{API}/signin", json={
            "email": "seeker@example.com",
            "password": "secret-password",
        })
        assert r.status_code == 429
        assert r.json()["retry_after_seconds"] > 0


class TestSession:
    def test_session_returns_profile(self, client):
        user_id, token = employer(client)
        r = client.get(f"{API}/session", headers=auth(token))
        assert r.status_code == 200
        assert r.json()["user"]["id"] == user_id

    def test_session_requires_token(self, client):
        r = client.get(f"{API}/session")
        assert r.status_code == 401
        assert r.headers["www-authenticate"] == "Bearer"

    def test_session_accepts_lowercase_scheme(self, client):
        user_id, token = seeker(client)
        r = client.get(f"{API}/session", headers={"Authorization": f"bearer {token}"})
        assert r.status_code == 200
        assert r.json()["user"]["id"] == user_id

    def test_session_rejects_invalid_token(self, client):
        r = client.get(f"{API}/session", headers=auth("not-a-token"))
        assert r.status_code == 401

    def test_session_rejects_public_anon_key(self, client, feature_flags):
        r = client.get(f"{API}/session", headers=auth(feature_flags.public_anon_key))
        assert r.status_code == 401

    def test_session_expires(self, client, feature_flags):
        _, token = seeker(client)
        feature_flags.session_ttl_seconds = -1
        # Any later verify sees the token as expired
        client.get(f"{API}/session", headers=auth(token))
        r = client.get(f"{API}/session", headers=auth(token))
        assert r.status_code == 401

    def test_signout_revokes_token(self, client):
        _, token = sign_up(client, "leaving@example.com")
        r = client.post(f"{API}/signout", headers=auth(token))
        assert r.status_code == 200
        assert r.json()["success"] is True

        r = client.get(f"{API}/session", headers=auth(token))
        assert r.status_code == 401
