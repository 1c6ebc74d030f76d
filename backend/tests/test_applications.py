import pytest
from conftest import apply, create_job, register

from jobnest.models.application import Application
from jobnest.models.notification import Notification
from jobnest.services.notifications import STATUS_MESSAGES


def test_submit_application_uploads_cv(client, db, media, job, seeker):
    response = apply(client, seeker, job["id"])
    assert response.status_code == 201
    application = response.json()["application"]
    assert application["status"] == "pending"
    assert application["cv_url"].startswith("https://media.test/cvs/")
    assert media.calls[0]["folder"] == "cvs"
    assert media.calls[0]["content_type"] == "application/pdf"
    # submitting is not announced to anyone
    assert db.query(Notification).count() == 0


def test_duplicate_application_is_conflict(client, db, job, seeker):
    assert apply(client, seeker, job["id"]).status_code == 201
    response = apply(client, seeker, job["id"])
    assert response.status_code == 409
    assert response.json()["message"] == "You have already applied for this job."
    rows = (
        db.query(Application)
        .filter(Application.user_id == seeker["user"]["id"], Application.job_id == job["id"])
        .count()
    )
    assert rows == 1


def test_submit_application_validation(client, company_owner, job, seeker):
    response = client.post(
        "/api/applications",
        data={"job_id": "abc"},
        files={"cv": ("cv.pdf", b"data", "application/pdf")},
        headers=seeker["headers"],
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Job ID is required or invalid."

    response = client.post("/api/applications/create", data={"job_id": str(job["id"])}, headers=seeker["headers"])
    assert response.status_code == 400
    assert response.json()["message"] == "No file uploaded."

    assert apply(client, seeker, 9999).status_code == 404

    closed = create_job(client, company_owner, company_owner["company"]["id"], title="Closed", status="closed")
    assert apply(client, seeker, closed["id"]).status_code == 400


def test_companies_cannot_apply(client, company_owner, job):
    response = apply(client, company_owner, job["id"])
    assert response.status_code == 403


def test_upload_failure_aborts_application(client, db, media, job, seeker):
    media.fail = True
    response = apply(client, seeker, job["id"])
    assert response.status_code == 502
    assert db.query(Application).count() == 0


@pytest.mark.parametrize("status", ["pending", "reviewed", "accepted", "rejected"])
def test_status_update_creates_exactly_one_notification(client, db, company_owner, job, seeker, status):
    application_id = apply(client, seeker, job["id"]).json()["application"]["id"]

    response = client.put(
        f"/api/applications/{application_id}/status",
        json={"status": status},
        headers=company_owner["headers"],
    )
    assert response.status_code == 200
    body = response.json()
    assert body["application"]["status"] == status
    assert body["notification"]["message"] == STATUS_MESSAGES[status]

    notifications = db.query(Notification).filter(Notification.user_id == seeker["user"]["id"]).all()
    assert len(notifications) == 1
    assert notifications[0].message == STATUS_MESSAGES[status]
    assert notifications[0].is_read is False


def test_status_update_rejects_unknown_status(client, db, company_owner, job, seeker):
    application_id = apply(client, seeker, job["id"]).json()["application"]["id"]
    response = client.put(
        f"/api/applications/{application_id}/status",
        json={"status": "hired"},
        headers=company_owner["headers"],
    )
    assert response.status_code == 400
    assert db.query(Notification).count() == 0


def test_status_update_requires_owning_company(client, job, seeker):
    application_id = apply(client, seeker, job["id"]).json()["application"]["id"]
    rival = register(client, "rival@other.test", role="company")
    response = client.put(
        f"/api/applications/{application_id}/status",
        json={"status": "accepted"},
        headers=rival["headers"],
    )
    assert response.status_code == 403


def test_accepted_application_reaches_applicant(client, company_owner, seeker):
    job = create_job(client, company_owner, company_owner["company"]["id"], title="Platform Engineer", status="active")
    application_id = apply(client, seeker, job["id"]).json()["application"]["id"]

    response = client.put(
        f"/api/applications/{application_id}/status",
        json={"status": "accepted"},
        headers=company_owner["headers"],
    )
    assert response.status_code == 200

    inbox = client.get("/api/notification/user", headers=seeker["headers"]).json()
    assert inbox["unread"] == 1
    latest = inbox["notifications"][0]
    assert latest["message"] == "Congratulations! Your application has been accepted."
    assert latest["is_read"] is False


def test_listing_applications(client, company_owner, job, seeker):
    other = register(client, "other@example.test")
    apply(client, seeker, job["id"])
    apply(client, other, job["id"])
    client.post(
        "/api/profile",
        json={"full_name": "Sam Seeker"},
        headers=seeker["headers"],
    )

    mine = client.get("/api/applications/user", headers=seeker["headers"]).json()
    assert len(mine) == 1
    assert mine[0]["job_title"] == "Backend Engineer"
    assert mine[0]["company_name"] == "Acme Corp"

    response = client.get(f"/api/applications/job/{job['id']}", headers=company_owner["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["totalCount"] == 2
    by_email = {item["applicant_email"]: item for item in body["applications"]}
    assert by_email["seeker@example.test"]["applicant_name"] == "Sam Seeker"
    assert by_email["other@example.test"]["applicant_name"] is None

    filtered = client.get(
        f"/api/applications/job/{job['id']}",
        params={"status": "accepted"},
        headers=company_owner["headers"],
    ).json()
    assert filtered["applications"] == []

    assert client.get(f"/api/applications/job/{job['id']}", headers=seeker["headers"]).status_code == 403


def test_get_and_delete_application(client, db, company_owner, job, seeker):
    application_id = apply(client, seeker, job["id"]).json()["application"]["id"]

    detail = client.get(f"/api/applications/{application_id}", headers=company_owner["headers"])
    assert detail.status_code == 200
    assert detail.json()["applicant_email"] == "seeker@example.test"

    stranger = register(client, "stranger@example.test")
    assert client.delete(f"/api/applications/{application_id}", headers=stranger["headers"]).status_code == 403

    response = client.delete(f"/api/applications/{application_id}", headers=seeker["headers"])
    assert response.status_code == 200
    assert db.query(Application).count() == 0
    assert client.get(f"/api/applications/{application_id}", headers=company_owner["headers"]).status_code == 404
