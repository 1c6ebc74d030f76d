import pytest

from jobnest.schemas.profile import parse_birth_date


def test_profile_round_trip(client, seeker):
    created = client.post("/api/profile", json={"full_name": "Ada", "phone": "123"}, headers=seeker["headers"])
    assert created.status_code == 201

    body = client.get("/api/profile/me", headers=seeker["headers"]).json()
    profile = body["profile"]
    assert profile["full_name"] == "Ada"
    assert profile["phone"] == "123"
    for field in ("birth_date", "bio", "location", "profile_picture"):
        assert profile[field] is None
    assert body["user"]["email"] == "seeker@example.test"


def test_me_without_profile(client, seeker):
    body = client.get("/api/profile/me", headers=seeker["headers"]).json()
    assert body["profile"] is None
    assert body["user"]["role"] == "user"
    assert "message" in body


def test_one_profile_per_user(client, seeker):
    client.post("/api/profile", json={"full_name": "Ada"}, headers=seeker["headers"])
    response = client.post("/api/profile", json={"full_name": "Again"}, headers=seeker["headers"])
    assert response.status_code == 409


@pytest.mark.parametrize("birth_date", ["1990/01/02", "02-01-1990", "1990-02-30", "yesterday"])
def test_invalid_birth_date_is_rejected(client, seeker, birth_date):
    response = client.post("/api/profile", json={"full_name": "Ada", "birth_date": birth_date}, headers=seeker["headers"])
    assert response.status_code == 400
    assert client.get("/api/profile/me", headers=seeker["headers"]).json()["profile"] is None


def test_parse_birth_date():
    assert parse_birth_date("1990-01-02").isoformat() == "1990-01-02"
    assert parse_birth_date(None) is None
    with pytest.raises(ValueError):
        parse_birth_date("1990-13-01")
    with pytest.raises(ValueError):
        parse_birth_date("90-01-02")


def test_update_only_touches_present_fields(client, seeker):
    client.post(
        "/api/profile",
        json={"full_name": "Ada", "bio": "Engineer", "birth_date": "1990-01-02"},
        headers=seeker["headers"],
    )
    response = client.put("/api/profile", json={"location": "London"}, headers=seeker["headers"])
    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["location"] == "London"
    assert profile["full_name"] == "Ada"
    assert profile["bio"] == "Engineer"
    assert profile["birth_date"] == "1990-01-02"


def test_update_requires_fields_and_profile(client, seeker):
    assert client.put("/api/profile", json={}, headers=seeker["headers"]).status_code == 400
    unknown_only = client.put("/api/profile", json={"nickname": "x"}, headers=seeker["headers"])
    assert unknown_only.status_code == 400
    assert unknown_only.json()["message"] == "No fields provided for update"
    assert client.put("/api/profile", json={"bio": "hi"}, headers=seeker["headers"]).status_code == 404


def test_profile_picture_upload(client, media, seeker):
    response = client.post(
        "/api/profile",
        data={"full_name": "Ada"},
        files={"profile_picture": ("me.jpg", b"\xff\xd8jpeg", "image/jpeg")},
        headers=seeker["headers"],
    )
    assert response.status_code == 201
    assert response.json()["profile"]["profile_picture"].startswith("https://media.test/profile_pictures/")

    rejected = client.put(
        "/api/profile",
        data={"bio": "x"},
        files={"profile_picture": ("me.txt", b"text", "text/plain")},
        headers=seeker["headers"],
    )
    assert rejected.status_code == 400
    assert rejected.json()["message"] == "Only image files are allowed!"


def test_public_lookup_and_listing(client, seeker, company_owner):
    client.post("/api/profile", json={"full_name": "Ada"}, headers=seeker["headers"])
    client.post("/api/profile", json={"full_name": "Boss"}, headers=company_owner["headers"])

    public = client.get(f"/api/profile/user/{seeker['user']['id']}")
    assert public.status_code == 200
    assert public.json()["email"] == "seeker@example.test"
    assert public.json()["role"] == "user"
    assert client.get("/api/profile/user/9999").status_code == 404

    listing = client.get("/api/profile/all", params={"limit": 1, "page": 2}).json()
    assert listing["pagination"]["totalCount"] == 2
    assert listing["pagination"]["hasPrevPage"] is True
    assert [item["full_name"] for item in listing["profiles"]] == ["Boss"]


def test_delete_profile(client, seeker):
    client.post("/api/profile", json={"full_name": "Ada"}, headers=seeker["headers"])
    assert client.delete("/api/profile", headers=seeker["headers"]).status_code == 200
    assert client.delete("/api/profile", headers=seeker["headers"]).status_code == 404
