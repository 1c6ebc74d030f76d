from jose import jwt

from jobnest.auth import create_access_token, decode_access_token, hash_password, verify_password
from jobnest.config import settings
from jobnest.models.user import User


def test_password_hash_roundtrip():
    password = "strong-pass-123"
    hashed = hash_password(password)
    assert hashed.startswith("pbkdf2_sha256$")
    assert verify_password(password, hashed)
    assert not verify_password("wrong-password", hashed)


def test_verify_password_rejects_malformed_hash():
    assert not verify_password("anything", "not-a-hash")


def test_access_token_roundtrip():
    user = User(id=42, email="a@b.test", role="company")
    token = create_access_token(user, company_id=7)
    claims = decode_access_token(token)
    assert claims["id"] == 42
    assert claims["email"] == "a@b.test"
    assert claims["role"] == "company"
    assert claims["company_id"] == 7


def test_token_without_company_has_no_company_claim():
    claims = decode_access_token(create_access_token(User(id=1, email="u@b.test", role="user")))
    assert "company_id" not in claims


def test_decode_rejects_expired_and_foreign_tokens():
    user = User(id=3, email="x@b.test", role="user")
    assert decode_access_token(create_access_token(user, ttl_minutes=-1)) is None
    forged = jwt.encode({"id": 3, "role": "company"}, "other-secret", algorithm=settings.jwt_algorithm)
    assert decode_access_token(forged) is None
    assert decode_access_token("garbage") is None
    assert decode_access_token("") is None


def test_protected_route_requires_token(client):
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json() == {"message": "Access denied. No token provided."}

    response = client.get("/api/users/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token."
