import pytest
from fastapi.testclient import TestClient

from hallpass.main import create_application

API = "/api/v1"


@pytest.fixture
def client(settings):
    with TestClient(create_application(settings)) as client:
        yield client


@pytest.fixture
def admin_client(client):
    assert client.post(f"{API}/admin/login", json={"password": "secret"}).status_code == 200
    client.post(f"{API}/students", json={"name": "Ada", "student_id": "1001", "grade": "10"})
    return client


def _error_code(response):
    body = response.json()
    assert body["success"] is False
    return body["error"]["code"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["schema_revision"] == "0002_secondary_indexes"
    assert "X-Request-ID" in response.headers


def test_roster_mutation_requires_admin(client):
    response = client.post(f"{API}/students", json={"name": "Ada", "student_id": "1", "grade": "9"})
    assert response.status_code == 403
    assert _error_code(response) == "PERMISSION_DENIED"


def test_wrong_admin_password(client):
    response = client.post(f"{API}/admin/login", json={"password": "nope"})
    assert response.status_code == 403
    assert client.get(f"{API}/admin/status").json() == {"is_admin": False}


def test_logout_leaves_admin_mode(admin_client):
    admin_client.post(f"{API}/admin/logout")
    response = admin_client.delete(f"{API}/students/whatever")
    assert _error_code(response) == "PERMISSION_DENIED"


def test_duplicate_student(admin_client):
    response = admin_client.post(
        f"{API}/students", json={"name": "Other", "student_id": "1001", "grade": "9"}
    )
    assert response.status_code == 409
    assert _error_code(response) == "DUPLICATE_KEY"


def test_lookup_by_student_id(admin_client):
    assert admin_client.get(f"{API}/students/by-student-id/1001").json()["name"] == "Ada"
    response = admin_client.get(f"{API}/students/by-student-id/9999")
    assert response.status_code == 404
    assert _error_code(response) == "NOT_FOUND"


def test_request_validation_envelope(client):
    response = client.post(f"{API}/signouts", json={})
    assert response.status_code == 422
    assert _error_code(response) == "VALIDATION_ERROR"


def test_sign_out_override_flow(admin_client):
    for _ in range(2):
        out = admin_client.post(
            f"{API}/signouts", json={"student_id": "1001", "destination": "Bathroom"}
        )
        assert out.json()["status"] == "signed_out"
        assert admin_client.post(f"{API}/signins", json={"student_id": "1001"}).status_code == 200

    attempt = admin_client.post(
        f"{API}/signouts", json={"student_id": "1001", "destination": "Bathroom", "reason": "Urgent"}
    )
    assert attempt.json()["status"] == "override_required"
    assert admin_client.get(f"{API}/signouts/pending").json()["student"]["student_id"] == "1001"

    wrong = admin_client.post(f"{API}/signouts/override", json={"pin": "1111"})
    assert wrong.status_code == 403
    assert _error_code(wrong) == "OVERRIDE_PIN_MISMATCH"

    granted = admin_client.post(f"{API}/signouts/override", json={"pin": "2468"})
    assert granted.status_code == 200
    assert granted.json()["entry"]["override"] is True
    assert admin_client.get(f"{API}/signouts/pending").json() is None

    recent = admin_client.get(f"{API}/ledger/recent", params={"limit": 2}).json()
    assert [e["type"] for e in recent] == ["signout", "signin"]
    assert recent[0]["override"] is True

    active = admin_client.get(f"{API}/signouts/active").json()
    assert [a["student"]["student_id"] for a in active] == ["1001"]

    stats = admin_client.get(f"{API}/dashboard").json()
    assert stats["signed_out"] == 1
    assert stats["monitored_out"] == 1


def test_double_sign_in(admin_client):
    response = admin_client.post(f"{API}/signins", json={"student_id": "1001"})
    assert response.status_code == 409
    assert _error_code(response) == "INVALID_TRANSITION"


def test_override_pin_is_compared_verbatim(admin_client):
    for _ in range(2):
        admin_client.post(f"{API}/signouts", json={"student_id": "1001", "destination": "Bathroom"})
        admin_client.post(f"{API}/signins", json={"student_id": "1001"})
    admin_client.post(f"{API}/signouts", json={"student_id": "1001", "destination": "Bathroom"})

    padded = admin_client.post(f"{API}/signouts/override", json={"pin": " 2468 "})
    assert padded.status_code == 403
    assert _error_code(padded) == "OVERRIDE_PIN_MISMATCH"

    exact = admin_client.post(f"{API}/signouts/override", json={"pin": "2468"})
    assert exact.json()["status"] == "signed_out"


def test_destinations(client):
    body = client.get(f"{API}/destinations").json()
    assert body[0] == "Bathroom"
    assert "Nurse" in body


def test_cancel_override_without_pending(admin_client):
    assert admin_client.delete(f"{API}/signouts/override").json() is None
    response = admin_client.post(f"{API}/signouts/override", json={"pin": "2468"})
    assert _error_code(response) == "NO_PENDING_OVERRIDE"


def test_upload_csv(client):
    content = b"Name,Student ID,Grade\nAda,1,10\nBob,,11\nCy,3,9\n"
    response = client.post(
        f"{API}/students/upload",
        files={"file": ("roster.csv", content, "text/csv")},
    )
    body = response.json()
    assert response.status_code == 200
    assert body["successful_rows"] == 2
    assert body["errors"] == [{"row": 3, "message": "Student ID is required"}]
    assert len(client.get(f"{API}/students").json()) == 2


def test_upload_rejects_other_files(client):
    response = client.post(
        f"{API}/students/upload",
        files={"file": ("roster.txt", b"x", "text/plain")},
    )
    assert response.status_code == 400
    assert _error_code(response) == "UPLOAD_FAILED"


def test_detect_columns_and_template(client):
    mapping = client.post(
        f"{API}/students/detect-columns", json={"headers": ["ID", "Name", "Grade"]}
    ).json()
    assert mapping["student_id"] == 0
    assert mapping["name"] == 1

    template = client.get(f"{API}/students/template")
    assert template.status_code == 200
    assert template.content[:2] == b"PK"


def test_scan_select_mode(admin_client):
    body = admin_client.post(f"{API}/scanner/scan", json={"scanned_id": "1001"}).json()
    assert body["action"] == "selected"


def test_current_period(client):
    body = client.get(f"{API}/periods/current").json()
    assert body["label"] in {"Q1", "Q2", "Q3", "Q4"}


def test_reset_requires_admin(admin_client):
    admin_client.post(f"{API}/admin/logout")
    assert admin_client.post(f"{API}/admin/reset").status_code == 403

    admin_client.post(f"{API}/admin/login", json={"password": "secret"})
    assert admin_client.post(f"{API}/admin/reset").status_code == 200
    assert admin_client.get(f"{API}/students").json() == []
