"""Login / logout / status and the session gate"""

from datetime import timedelta

from session_auth import SESSION_COOKIE, SessionStore


class TestLogin:

    def test_login_returns_profile_and_sets_cookie(self, client, operator):
        resp = client.post("/api/auth/login", json={"username": "operator", "password": "s3cret"})

        assert resp.status_code == 200
        assert resp.json() == {
            "id": operator.id,
            "username": "operator",
            "fullName": "Duty Operator",
            "email": "operator@example.com",
            "role": "call_agent",
            "agency": "IPCR",
        }
        assert SESSION_COOKIE in resp.cookies

    def test_wrong_password(self, client, operator):
        resp = client.post("/api/auth/login", json={"username": "operator", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid username or password"}

    def test_unknown_user(self, client):
        resp = client.post("/api/auth/login", json={"username": "ghost", "password": "x"})
        assert resp.status_code == 401

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={"username": "operator"})
        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Validation error")

    def test_relogin_replaces_session(self, auth_client):
        sessions = auth_client.app.state.sessions
        assert len(sessions) == 1
        auth_client.post("/api/auth/login", json={"username": "operator", "password": "s3cret"})
        assert len(sessions) == 1


class TestStatusAndLogout:

    def test_anonymous_status(self, client):
        assert client.get("/api/auth/status").json() == {"authenticated": False}

    def test_status_after_login(self, auth_client):
        body = auth_client.get("/api/auth/status").json()
        assert body["authenticated"] is True
        assert body["user"]["username"] == "operator"
        assert "password" not in body["user"]

    def test_logout_ends_session(self, auth_client):
        resp = auth_client.post("/api/auth/logout")
        assert resp.json() == {"success": True}
        assert len(auth_client.app.state.sessions) == 0
        assert auth_client.get("/api/auth/status").json() == {"authenticated": False}
        assert auth_client.get("/api/users").status_code == 401

    def test_logout_without_session(self, client):
        assert client.post("/api/auth/logout").json() == {"success": True}

    def test_deleted_user_loses_access(self, auth_client, store, operator):
        store.users.delete(operator.id)
        assert auth_client.get("/api/auth/status").json() == {"authenticated": False}
        assert auth_client.get("/api/call-logs").status_code == 401


class TestGate:

    def test_public_reads(self, client):
        for path in ("/api/incidents", "/api/alerts", "/api/social-trends", "/api/stats", "/api/lookups"):
            assert client.get(path).status_code == 200, path

    def test_gated_reads(self, client):
        for path in ("/api/call-logs", "/api/response-plans", "/api/users"):
            resp = client.get(path)
            assert resp.status_code == 401, path
            assert resp.json() == {"message": "Unauthorized"}

    def test_gated_writes(self, client):
        for path in ("/api/incidents", "/api/alerts", "/api/social-trends"):
            assert client.post(path, json={}).status_code == 401, path
            assert client.put(f"{path}/1", json={}).status_code == 401, path
            assert client.delete(f"{path}/1").status_code == 401, path

    def test_forged_cookie(self, client, operator):
        client.cookies.set(SESSION_COOKIE, "made-up-token")
        assert client.get("/api/users").status_code == 401


class TestSessionStore:

    def test_create_resolve_destroy(self):
        sessions = SessionStore()
        token = sessions.create(5)
        assert sessions.resolve(token) == 5
        assert sessions.destroy(token)
        assert sessions.resolve(token) is None

    def test_expired_session_pruned(self):
        sessions = SessionStore(lifetime=timedelta(seconds=-1))
        token = sessions.create(5)
        assert sessions.resolve(token) is None
        assert len(sessions) == 0

    def test_missing_token(self):
        assert SessionStore().resolve(None) is None
        assert SessionStore().destroy("") is False
