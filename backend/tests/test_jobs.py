from conftest import apply, create_company, create_job, register

from jobnest.models.application import Application
from jobnest.models.favorite import Favorite
from jobnest.models.job import Job


def _titles(response) -> set[str]:
    return {item["title"] for item in response.json()}


def test_create_job_requires_title_and_description(client, db, company_owner):
    company_id = company_owner["company"]["id"]
    for payload in (
        {"company_id": company_id, "description": "No title here"},
        {"company_id": company_id, "title": "No description"},
        {"company_id": company_id, "title": "   ", "description": "blank title"},
    ):
        response = client.post("/api/jobs", json=payload, headers=company_owner["headers"])
        assert response.status_code == 400
        assert response.json()["message"] == "Title, description, and company_id are required."
    assert db.query(Job).count() == 0


def test_create_job_defaults_to_owned_company(client, company_owner):
    response = client.post(
        "/api/jobs",
        json={"title": "Data Engineer", "description": "Pipelines"},
        headers=company_owner["headers"],
    )
    assert response.status_code == 201
    job = response.json()["job"]
    assert job["company_id"] == company_owner["company"]["id"]
    assert job["company_name"] == "Acme Corp"
    assert job["job_type"] == "full_time"
    assert job["work_mode"] == "onsite"
    assert job["status"] == "active"


def test_job_seekers_cannot_post_jobs(client, seeker, company_owner):
    response = client.post(
        "/api/jobs",
        json={"company_id": company_owner["company"]["id"], "title": "x", "description": "y"},
        headers=seeker["headers"],
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Forbidden: Only company, company_admin allowed."


def test_only_owner_can_mutate_job(client, company_owner, job):
    rival = register(client, "rival@other.test", role="company")
    create_company(client, rival, name="Other Inc")

    response = client.put(f"/api/jobs/{job['id']}", json={"title": "Hijacked"}, headers=rival["headers"])
    assert response.status_code == 403
    response = client.delete(f"/api/jobs/{job['id']}", headers=rival["headers"])
    assert response.status_code == 403

    response = client.post(
        "/api/jobs",
        json={"company_id": company_owner["company"]["id"], "title": "x", "description": "y"},
        headers=rival["headers"],
    )
    assert response.status_code == 403


def test_update_job_is_sparse(client, company_owner, job):
    response = client.put(
        f"/api/jobs/{job['id']}",
        json={"salary_min": 50000, "location": None},
        headers=company_owner["headers"],
    )
    assert response.status_code == 200
    updated = response.json()["job"]
    assert updated["salary_min"] == 50000
    assert updated["title"] == job["title"]
    assert updated["location"] == "Berlin"


def test_update_job_rejects_unknown_status(client, company_owner, job):
    response = client.put(f"/api/jobs/{job['id']}", json={"status": "archived"}, headers=company_owner["headers"])
    assert response.status_code == 400


def test_list_jobs_filters(client, company_owner):
    company_id = company_owner["company"]["id"]
    create_job(client, company_owner, company_id, title="Python Developer", location="Berlin", work_mode="remote")
    create_job(client, company_owner, company_id, title="Java Developer", location="Munich", job_type="part_time")
    create_job(client, company_owner, company_id, title="Closed Role", location="Berlin", status="closed")

    assert _titles(client.get("/api/jobs", params={"location": "berl"})) == {"Python Developer", "Closed Role"}
    assert _titles(client.get("/api/jobs", params={"search": "python"})) == {"Python Developer"}
    assert _titles(client.get("/api/jobs", params={"job_type": "part_time"})) == {"Java Developer"}
    assert _titles(client.get("/api/jobs", params={"work_mode": "remote"})) == {"Python Developer"}
    assert _titles(client.get("/api/jobs", params={"status": "closed"})) == {"Closed Role"}
    assert len(client.get("/api/jobs", params={"company_id": company_id}).json()) == 3


def test_get_job_and_missing_job(client, job):
    response = client.get(f"/api/jobs/{job['id']}")
    assert response.status_code == 200
    assert response.json()["company_name"] == "Acme Corp"
    assert client.get("/api/jobs/9999").status_code == 404


def test_delete_job_removes_applications_and_favorites(client, db, company_owner, job, seeker):
    assert apply(client, seeker, job["id"]).status_code == 201
    assert client.post("/api/favorite/create", json={"job_id": job["id"]}, headers=seeker["headers"]).status_code == 201

    response = client.delete(f"/api/jobs/{job['id']}", headers=company_owner["headers"])
    assert response.status_code == 200
    assert db.query(Job).count() == 0
    assert db.query(Application).count() == 0
    assert db.query(Favorite).count() == 0
