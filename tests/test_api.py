"""
End-to-end tests over HTTP: envelopes, camelCase, status codes.
"""

import logging

import pytest

CONCERT = {"title": "Winter Concert", "date": "2026-12-01T18:00:00Z", "venue": "City Hall"}


@pytest.fixture
def concert_id(admin_client):
    response = admin_client.post("/api/concerts", json=CONCERT)
    assert response.status_code == 200, response.text
    return response.json()["data"]["id"]


# =============================================================================
# Concerts
# =============================================================================


class TestConcertsApi:
    def test_create_returns_camel_case(self, admin_client):
        response = admin_client.post("/api/concerts", json=CONCERT)

        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Concert created"
        data = body["data"]
        assert data["title"] == "Winter Concert"
        assert data["isActive"] is True
        assert "updatedAt" in data
        assert "is_active" not in data

    def test_detail(self, viewer_client, concert_id):
        response = viewer_client.get("/api/concerts", params={"id": concert_id})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["concert"]["id"] == concert_id
        assert data["attendanceForms"] == []
        assert data["scores"] == []
        assert data["practices"] == []

    def test_detail_not_found(self, viewer_client):
        response = viewer_client.get("/api/concerts", params={"id": "concert_missing"})

        assert response.status_code == 404
        assert response.json() == {"error": "Concert not found"}

    def test_missing_field_is_400(self, admin_client):
        response = admin_client.post("/api/concerts", json={"title": "No date", "venue": "Hall"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("date:")

    def test_bad_date_is_400(self, admin_client):
        response = admin_client.post("/api/concerts", json={**CONCERT, "date": "next tuesday"})

        assert response.status_code == 400

    def test_invalid_json_is_400(self, admin_client):
        response = admin_client.post(
            "/api/concerts",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Request body is not valid JSON"}

    def test_patch_and_null_required(self, admin_client, concert_id):
        response = admin_client.put("/api/concerts", json={"concertId": concert_id, "venue": "Opera House"})
        assert response.status_code == 200
        assert response.json()["data"]["venue"] == "Opera House"
        assert response.json()["data"]["title"] == "Winter Concert"

        response = admin_client.put("/api/concerts", json={"concertId": concert_id, "title": None})
        assert response.status_code == 400
        assert response.json() == {"error": "title cannot be null"}

    def test_put_without_id_is_400(self, admin_client):
        response = admin_client.put("/api/concerts", json={"title": "x"})

        assert response.status_code == 400

    def test_soft_delete(self, admin_client, concert_id):
        response = admin_client.delete("/api/concerts", params={"id": concert_id})
        assert response.status_code == 200
        assert response.json()["data"]["isActive"] is False

        active = admin_client.get("/api/concerts", params={"active": "true"}).json()["data"]
        assert active == []
        everything = admin_client.get("/api/concerts").json()["data"]
        assert [c["id"] for c in everything] == [concert_id]

        # Still reachable by id, and deleting again is fine.
        assert admin_client.get("/api/concerts", params={"id": concert_id}).status_code == 200
        assert admin_client.delete("/api/concerts", params={"id": concert_id}).status_code == 200

    def test_blank_filters_list_everything(self, viewer_client, admin_client, concert_id):
        admin_client.delete("/api/concerts", params={"id": concert_id})

        for params in ({"active": ""}, {"active": "false"}, {"id": ""}, {"active": "", "id": ""}):
            response = viewer_client.get("/api/concerts", params=params)
            assert response.status_code == 200, params
            assert [c["id"] for c in response.json()["data"]] == [concert_id]

    def test_blank_id_falls_back_to_child_list(self, viewer_client, concert_id):
        response = viewer_client.get("/api/scores", params={"id": "", "concertId": concert_id})

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_delete_without_id_is_400(self, admin_client):
        response = admin_client.delete("/api/concerts")

        assert response.status_code == 400
        assert response.json() == {"error": "id is required"}


# =============================================================================
# Children
# =============================================================================


class TestAttendanceApi:
    def test_crud(self, admin_client, concert_id):
        created = admin_client.post("/api/attendance", json={
            "concertId": concert_id,
            "title": "RSVP",
            "url": "https://forms.example.com/rsvp",
        })
        assert created.status_code == 200
        form_id = created.json()["data"]["id"]

        listed = admin_client.get("/api/attendance", params={"concertId": concert_id}).json()["data"]
        assert [f["id"] for f in listed] == [form_id]

        updated = admin_client.put("/api/attendance", json={"attendanceFormId": form_id, "title": "RSVP by Friday"})
        assert updated.json()["data"]["title"] == "RSVP by Friday"
        assert updated.json()["data"]["url"] == "https://forms.example.com/rsvp"

        assert admin_client.delete("/api/attendance", params={"id": form_id}).status_code == 200
        assert admin_client.delete("/api/attendance", params={"id": form_id}).status_code == 404

    def test_unknown_concert_is_404(self, admin_client):
        response = admin_client.post("/api/attendance", json={
            "concertId": "concert_missing",
            "title": "RSVP",
            "url": "https://forms.example.com/rsvp",
        })

        assert response.status_code == 404

    def test_bad_url_is_400(self, admin_client, concert_id):
        response = admin_client.post("/api/attendance", json={
            "concertId": concert_id,
            "title": "RSVP",
            "url": "not a url",
        })

        assert response.status_code == 400
        assert response.json() == {"error": "url: must be a valid URL"}

    def test_list_requires_concert_id(self, viewer_client):
        response = viewer_client.get("/api/attendance")

        assert response.status_code == 400
        assert response.json() == {"error": "concertId is required"}


class TestScoresApi:
    def test_comment_flow(self, admin_client, viewer_client, concert_id):
        created = admin_client.post("/api/scores", json={
            "concertId": concert_id,
            "title": "Symphony No. 9",
            "url": "https://example.com/9.pdf",
        }).json()["data"]
        assert created["isValid"] is True
        assert created["comments"] == []

        admin_client.put("/api/scores", json={"scoreId": created["id"], "isValid": False, "comment": "Wrong edition"})
        admin_client.put("/api/scores", json={"scoreId": created["id"], "comment": "Replaced file"})

        scores = viewer_client.get("/api/scores", params={"concertId": concert_id}).json()["data"]
        assert scores[0]["isValid"] is False
        assert [c["content"] for c in scores[0]["comments"]] == ["Replaced file", "Wrong edition"]
        assert scores[0]["comments"][0]["scoreId"] == created["id"]

    def test_viewer_cannot_comment(self, viewer_client):
        response = viewer_client.put("/api/scores", json={"scoreId": "score_x", "comment": "hi"})

        assert response.status_code == 403

    def test_delete(self, admin_client, concert_id):
        score_id = admin_client.post("/api/scores", json={
            "concertId": concert_id,
            "title": "Overture",
            "url": "https://example.com/o.pdf",
        }).json()["data"]["id"]

        assert admin_client.delete("/api/scores", params={"id": score_id}).status_code == 200
        assert admin_client.get("/api/scores", params={"id": score_id}).status_code == 404


class TestPracticesApi:
    def test_window_and_order(self, admin_client, concert_id):
        bad = admin_client.post("/api/practices", json={
            "concertId": concert_id,
            "title": "Sectional",
            "venue": "Room 4",
            "startTime": "2026-11-20T19:00:00Z",
            "endTime": "2026-11-20T18:00:00Z",
        })
        assert bad.status_code == 400
        assert bad.json() == {"error": "endTime must be after startTime"}

        for start in ("2026-11-27T19:00:00Z", "2026-11-20T19:00:00Z"):
            response = admin_client.post("/api/practices", json={
                "concertId": concert_id,
                "title": "Tutti",
                "venue": "Hall",
                "startTime": start,
                "audioUrl": "https://example.com/take.mp3",
            })
            assert response.status_code == 200

        practices = admin_client.get("/api/practices", params={"concertId": concert_id}).json()["data"]
        assert [p["startTime"][:10] for p in practices] == ["2026-11-20", "2026-11-27"]
        assert practices[0]["audioUrl"] == "https://example.com/take.mp3"

    def test_naive_time_is_utc(self, admin_client, concert_id):
        response = admin_client.post("/api/practices", json={
            "concertId": concert_id,
            "title": "Tutti",
            "venue": "Hall",
            "startTime": "2026-11-20T19:00:00",
        })

        assert response.json()["data"]["startTime"].startswith("2026-11-20T19:00:00")
        assert response.json()["data"]["startTime"].endswith("Z")


class TestContactApi:
    def test_not_found_before_first_write(self, viewer_client):
        assert viewer_client.get("/api/contact").status_code == 404

    def test_write_then_read(self, admin_client, viewer_client):
        response = admin_client.put("/api/contact", json={
            "email": "office@orch.example",
            "description": "  Questions welcome  ",
        })
        assert response.status_code == 200

        data = viewer_client.get("/api/contact").json()["data"]
        assert data["email"] == "office@orch.example"
        assert data["description"] == "Questions welcome"

    def test_bad_email_is_400(self, admin_client):
        response = admin_client.put("/api/contact", json={"email": "not-an-email", "description": "x"})

        assert response.status_code == 400
        assert response.json() == {"error": "email: must be a valid email address"}


# =============================================================================
# Error boundary
# =============================================================================


class TestErrorBoundary:
    def test_unexpected_error_is_generic_500(self, admin_client, repository, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("database exploded: secret detail")

        monkeypatch.setattr(repository, "list_concerts", boom)

        response = admin_client.get("/api/concerts")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "secret detail" not in response.text

    def test_unexpected_error_logged_once(self, admin_client, repository, monkeypatch, caplog):
        async def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(repository, "list_concerts", boom)

        with caplog.at_level(logging.ERROR, logger="orchlink.api.errors"):
            admin_client.get("/api/concerts")

        records = [r for r in caplog.records if r.name == "orchlink.api.errors"]
        assert len(records) == 1
        assert records[0].exc_info is not None
