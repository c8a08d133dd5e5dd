"""Incident endpoints, including the WebSocket push on create/update"""

from conftest import INCIDENT


class TestIncidentCrud:

    def test_create(self, auth_client, operator):
        resp = auth_client.post("/api/incidents", json={**INCIDENT, "reportedBy": 999})

        assert resp.status_code == 201
        body = resp.json()
        assert body["id"] == 1
        assert body["reportedBy"] == operator.id
        assert body["status"] == "active"
        assert body["verifiedBy"] is None
        assert body["coordinates"] == {"lat": 9.8965, "lng": 8.8583}
        assert body["reportedAt"]

    def test_create_invalid(self, auth_client):
        resp = auth_client.post("/api/incidents", json={**INCIDENT, "severity": "extreme"})
        assert resp.status_code == 400
        assert 'at "severity"' in resp.json()["message"]
        assert auth_client.get("/api/incidents").json() == []

    def test_create_non_object(self, auth_client):
        resp = auth_client.post("/api/incidents", json=[1, 2])
        assert resp.status_code == 400

    def test_list_and_limit(self, auth_client):
        for n in range(3):
            auth_client.post("/api/incidents", json={**INCIDENT, "title": f"Incident {n}"})

        titles = [i["title"] for i in auth_client.get("/api/incidents").json()]
        assert titles == ["Incident 0", "Incident 1", "Incident 2"]

        limited = auth_client.get("/api/incidents", params={"limit": 2}).json()
        assert [i["title"] for i in limited] == ["Incident 0", "Incident 1"]

    def test_bad_limit(self, client):
        resp = client.get("/api/incidents", params={"limit": "lots"})
        assert resp.status_code == 400

    def test_get_one(self, auth_client, client):
        auth_client.post("/api/incidents", json=INCIDENT)
        assert client.get("/api/incidents/1").json()["title"] == INCIDENT["title"]

    def test_get_missing(self, client):
        resp = client.get("/api/incidents/7")
        assert resp.status_code == 404
        assert resp.json() == {"message": "Incident not found"}

    def test_non_numeric_id(self, client):
        assert client.get("/api/incidents/abc").status_code == 400

    def test_partial_update(self, auth_client):
        created = auth_client.post("/api/incidents", json={**INCIDENT, "tags": ["market"]}).json()

        resp = auth_client.put("/api/incidents/1", json={"status": "resolved", "verifiedBy": 1})

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "resolved"
        assert body["verifiedBy"] == 1
        assert body["tags"] == ["market"]
        assert body["reportedAt"] == created["reportedAt"]
        assert auth_client.get("/api/incidents/1").json()["status"] == "resolved"

    def test_update_missing_is_404_before_validation(self, auth_client):
        resp = auth_client.put("/api/incidents/5", json={"severity": "extreme"})
        assert resp.status_code == 404

    def test_update_invalid(self, auth_client):
        auth_client.post("/api/incidents", json=INCIDENT)
        resp = auth_client.put("/api/incidents/1", json={"severity": "extreme"})
        assert resp.status_code == 400
        assert auth_client.get("/api/incidents/1").json()["severity"] == "high"

    def test_delete(self, auth_client):
        auth_client.post("/api/incidents", json=INCIDENT)
        assert auth_client.delete("/api/incidents/1").json() == {"success": True}
        assert auth_client.get("/api/incidents/1").status_code == 404
        assert auth_client.delete("/api/incidents/1").status_code == 404

        again = auth_client.post("/api/incidents", json=INCIDENT).json()
        assert again["id"] == 2


class TestIncidentBroadcast:

    def test_create_pushes_new_incident(self, auth_client):
        with auth_client.websocket_connect("/ws") as ws:
            assert ws.receive_json()["type"] == "CONNECTED"

            created = auth_client.post("/api/incidents", json=INCIDENT).json()
            message = ws.receive_json()

        assert message == {"type": "NEW_INCIDENT", "data": created}

    def test_update_pushes_update_incident(self, auth_client):
        auth_client.post("/api/incidents", json=INCIDENT)
        with auth_client.websocket_connect("/ws") as ws:
            ws.receive_json()
            updated = auth_client.put("/api/incidents/1", json={"status": "closed"}).json()
            message = ws.receive_json()

        assert message["type"] == "UPDATE_INCIDENT"
        assert message["data"] == updated

    def test_every_client_gets_the_push(self, auth_client):
        with auth_client.websocket_connect("/ws") as first, auth_client.websocket_connect("/ws") as second:
            first.receive_json()
            second.receive_json()
            auth_client.post("/api/incidents", json=INCIDENT)

            assert first.receive_json()["type"] == "NEW_INCIDENT"
            assert second.receive_json()["type"] == "NEW_INCIDENT"

    def test_rejected_create_pushes_nothing(self, auth_client):
        with auth_client.websocket_connect("/ws") as ws:
            ws.receive_json()
            auth_client.post("/api/incidents", json={"title": ""})
            ws.send_json({"type": "PING"})
            assert ws.receive_json()["type"] == "PONG"


class TestServerErrors:

    @staticmethod
    def _explode(*args, **kwargs):
        raise RuntimeError("disk controller on fire")

    def test_create_failure_is_generic_500(self, auth_client, store, monkeypatch, caplog):
        monkeypatch.setattr(store.incidents, "create", self._explode)

        with auth_client.websocket_connect("/ws") as ws:
            ws.receive_json()
            resp = auth_client.post("/api/incidents", json=INCIDENT)
            ws.send_json({"type": "PING"})
            assert ws.receive_json()["type"] == "PONG"

        assert resp.status_code == 500
        assert resp.json() == {"message": "Failed to create incident"}
        assert "disk controller" not in resp.text
        assert "disk controller on fire" in caplog.text

    def test_list_failure_is_generic_500(self, client, store, monkeypatch, caplog):
        monkeypatch.setattr(store.incidents, "list", self._explode)

        resp = client.get("/api/incidents")

        assert resp.status_code == 500
        assert resp.json() == {"message": "Failed to fetch incidents"}
        assert "disk controller" not in resp.text
        assert "disk controller on fire" in caplog.text

    def test_unhandled_error_uses_catch_all(self, lenient_client, monkeypatch, caplog):
        store = lenient_client.app.state.store
        monkeypatch.setattr(store.incidents, "get", self._explode)

        resp = lenient_client.get("/api/incidents/1")

        assert resp.status_code == 500
        assert resp.json() == {"message": "Internal Server Error"}
        assert "disk controller" not in resp.text
        assert "disk controller on fire" in caplog.text
