"""
Tests for the seating API endpoints
"""
import pytest

from exam_seating.config import settings
from exam_seating.db_models import NotificationDB, UserRole
from exam_seating.main_api import app
from exam_seating.notifications import DisabledNotificationSink


ROOMS = [{"name": "R1", "rows": 1, "cols": 3, "benchCapacity": 2}]


def generate_body(section_id, rooms=ROOMS):
    return {
        "sectionId": section_id,
        "examName": "End Sem - Operating Systems",
        "rooms": rooms,
        "date": "2026-11-02",
        "time": "10:00 AM - 1:00 PM",
    }


class TestEndToEnd:

    def test_generate_submit_approve_lookup(self, client, db_session, section, faculty, hod, students, headers_for):
        response = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty))
        assert response.status_code == 200
        preview = response.json()["preview"]
        assert len(preview["roomAssignments"]) == 1
        assert len(preview["roomAssignments"][0]["studentAssignments"]) == 5

        response = client.post("/api/seating", json=preview, headers=headers_for(faculty))
        assert response.status_code == 201
        plan = response.json()["seating"]
        assert plan["status"] == "pending"
        assert plan["faculty"] == faculty.id

        response = client.get("/api/seating/pending", headers=headers_for(hod))
        assert [p["id"] for p in response.json()["plans"]] == [plan["id"]]

        response = client.patch(
            f"/api/seating/{plan['id']}/status",
            json={"status": "approved", "hodRemarks": "Approved"},
            headers=headers_for(hod),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["seating"]["status"] == "approved"
        assert body["seating"]["hodRemarks"] == "Approved"
        assert body["notified"] == 5
        assert db_session.query(NotificationDB).count() == 5

        seat_numbers = set()
        for student in students:
            response = client.get("/api/seating/my-plan", headers=headers_for(student))
            assert response.status_code == 200
            seating = response.json()["seating"]
            assert len(seating) == 1
            assert seating[0]["examName"] == "End Sem - Operating Systems"
            assert seating[0]["room"] == "R1"
            assert seating[0]["date"] == "2026-11-02"
            seat_numbers.add(seating[0]["seatNumber"])

        assert len(seat_numbers) == 5
        assert seat_numbers <= set(range(1, 7))

        response = client.get("/api/seating/pending", headers=headers_for(hod))
        assert response.json()["plans"] == []

    def test_student_without_approved_plan(self, client, section, students, headers_for):
        response = client.get("/api/seating/my-plan", headers=headers_for(students[0]))

        assert response.status_code == 200
        assert response.json() == {"success": True, "seating": []}


class TestErrors:

    def test_capacity_exceeded(self, client, section, faculty, students, headers_for):
        rooms = [{"name": "R1", "rows": 1, "cols": 1, "benchCapacity": 2}]
        response = client.post("/api/seating/generate", json=generate_body(section.id, rooms), headers=headers_for(faculty))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "CAPACITY_EXCEEDED"
        assert body["unseatedCount"] == 3

    def test_invalid_room_spec(self, client, section, faculty, students, headers_for):
        rooms = [{"name": "R1", "rows": 0, "cols": 2}]
        response = client.post("/api/seating/generate", json=generate_body(section.id, rooms), headers=headers_for(faculty))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_missing_exam_name(self, client, section, faculty, headers_for):
        body = generate_body(section.id)
        del body["examName"]
        response = client.post("/api/seating/generate", json=body, headers=headers_for(faculty))

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["examName", "time"])
    def test_blank_text_fields(self, client, section, faculty, students, headers_for, field):
        body = generate_body(section.id)
        body[field] = "   "
        response = client.post("/api/seating/generate", json=body, headers=headers_for(faculty))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

        preview = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty)).json()["preview"]
        preview[field] = "   "
        response = client.post("/api/seating", json=preview, headers=headers_for(faculty))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_no_students(self, client, section, faculty, headers_for):
        response = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty))

        assert response.status_code == 400
        assert response.json()["message"] == "No active students found in this section"

    def test_unknown_section(self, client, faculty, headers_for):
        body = generate_body(404)
        response = client.post("/api/seating/generate", json=body, headers=headers_for(faculty))

        assert response.status_code == 404
        assert response.json()["code"] == "SECTION_NOT_FOUND"

    def test_second_decision_conflicts(self, client, section, faculty, hod, students, headers_for):
        preview = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty)).json()["preview"]
        plan_id = client.post("/api/seating", json=preview, headers=headers_for(faculty)).json()["seating"]["id"]

        first = client.patch(f"/api/seating/{plan_id}/status", json={"status": "rejected"}, headers=headers_for(hod))
        second = client.patch(f"/api/seating/{plan_id}/status", json={"status": "approved"}, headers=headers_for(hod))

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["code"] == "STATE_CONFLICT"

    def test_decide_missing_plan(self, client, hod, headers_for):
        response = client.patch("/api/seating/999/status", json={"status": "approved"}, headers=headers_for(hod))
        assert response.status_code == 404


class TestAccess:

    def test_no_token(self, client):
        response = client.get("/api/seating/my-plan")
        assert response.status_code == 401

    def test_bad_token(self, client):
        response = client.get("/api/seating/my-plan", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_inactive_user(self, client, make_user, section, headers_for):
        student = make_user(UserRole.STUDENT, section=section, is_active=False)
        response = client.get("/api/seating/my-plan", headers=headers_for(student))
        assert response.status_code == 401

    @pytest.mark.parametrize("method, path, role", [
        ("post", "/api/seating/generate", UserRole.STUDENT),
        ("get", "/api/seating/pending", UserRole.FACULTY),
        ("get", "/api/seating/my-plan", UserRole.FACULTY),
        ("patch", "/api/seating/1/status", UserRole.FACULTY),
        ("get", "/api/seating/history", UserRole.STUDENT),
        ("delete", "/api/seating/1", UserRole.STUDENT),
    ])
    def test_wrong_role(self, client, make_user, method, path, role, headers_for):
        user = make_user(role)
        response = client.request(method.upper(), path, json={}, headers=headers_for(user))
        assert response.status_code == 403

    def test_delete_not_owner(self, client, department, section, faculty, students, make_user, headers_for):
        other = make_user(UserRole.FACULTY, department=department)
        preview = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty)).json()["preview"]
        plan_id = client.post("/api/seating", json=preview, headers=headers_for(faculty)).json()["seating"]["id"]

        assert client.delete(f"/api/seating/{plan_id}", headers=headers_for(other)).status_code == 403
        assert client.delete(f"/api/seating/{plan_id}", headers=headers_for(faculty)).status_code == 200
        assert client.get("/api/seating/history", headers=headers_for(faculty)).json()["plans"] == []


class TestNotifications:

    def test_notify_and_read(self, client, section, faculty, students, headers_for):
        preview = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty)).json()["preview"]
        plan_id = client.post("/api/seating", json=preview, headers=headers_for(faculty)).json()["seating"]["id"]

        response = client.post(f"/api/seating/{plan_id}/notify", headers=headers_for(faculty))
        assert response.json() == {"success": True, "message": "Notifications sent to 5 students", "count": 5}

        notifications = client.get("/api/seating/notifications", headers=headers_for(students[0])).json()["notifications"]
        assert len(notifications) == 1
        assert notifications[0]["message"] == "Seating plan for End Sem - Operating Systems (10:00 AM - 1:00 PM) is now available."
        assert notifications[0]["isRead"] is False

        note_id = notifications[0]["id"]
        assert client.patch(f"/api/seating/notifications/{note_id}/read", headers=headers_for(students[1])).status_code == 404
        assert client.patch(f"/api/seating/notifications/{note_id}/read", headers=headers_for(students[0])).status_code == 200

        notifications = client.get("/api/seating/notifications", headers=headers_for(students[0])).json()["notifications"]
        assert notifications[0]["isRead"] is True

    def test_notify_with_notifications_disabled(self, client, db_session, section, faculty, students, headers_for, monkeypatch):
        monkeypatch.setattr(app.state, "notification_sink_factory", DisabledNotificationSink)
        preview = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty)).json()["preview"]
        plan_id = client.post("/api/seating", json=preview, headers=headers_for(faculty)).json()["seating"]["id"]

        response = client.post(f"/api/seating/{plan_id}/notify", headers=headers_for(faculty))

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Notifications are disabled, no students were notified",
            "count": 0,
        }
        assert db_session.query(NotificationDB).count() == 0


class TestExports:

    @pytest.fixture
    def plan_id(self, client, section, faculty, students, headers_for, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "EXPORT_DIR", str(tmp_path / "exports"))
        preview = client.post("/api/seating/generate", json=generate_body(section.id), headers=headers_for(faculty)).json()["preview"]
        return client.post("/api/seating", json=preview, headers=headers_for(faculty)).json()["seating"]["id"]

    def test_excel(self, client, plan_id, faculty, headers_for, tmp_path):
        response = client.get(f"/api/seating/{plan_id}/export/excel", headers=headers_for(faculty))

        assert response.status_code == 200
        assert (tmp_path / "exports" / f"seating_{plan_id}.xlsx").exists()

    def test_pdf(self, client, plan_id, hod, headers_for):
        response = client.get(f"/api/seating/{plan_id}/export/pdf", headers=headers_for(hod))

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_unrelated_faculty(self, client, plan_id, department, make_user, headers_for):
        other = make_user(UserRole.FACULTY, department=department)
        response = client.get(f"/api/seating/{plan_id}/export/pdf", headers=headers_for(other))
        assert response.status_code == 403


def test_root(client):
    assert client.get("/").json() == {"message": "Exam Seating API is running !"}
