from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from jobnest.config import settings
from jobnest.database import get_db
from jobnest.models.company import Company
from jobnest.models.company_admin import CompanyAdmin
from jobnest.models.user import User


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)
DEFAULT_ITERATIONS = 210_000


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        DEFAULT_ITERATIONS,
    ).hex()
    return f"pbkdf2_sha256${DEFAULT_ITERATIONS}${salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        _, iterations_str, salt, digest = password_hash.split("$", 3)
        iterations = int(iterations_str)
    except ValueError:
        return False
    expected = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
    ).hex()
    return hmac.compare_digest(expected, digest)


def create_access_token(user: User, company_id: int | None = None, ttl_minutes: int | None = None) -> str:
    minutes = ttl_minutes if ttl_minutes is not None else settings.token_ttl_minutes
    claims: dict[str, Any] = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    if company_id is not None:
        claims["company_id"] = company_id
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    if not token:
        return None
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if not isinstance(claims.get("id"), int):
        return None
    return claims


def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict[str, Any]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access denied. No token provided.")

    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")
    return claims


def get_current_user(
    claims: dict[str, Any] = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == claims["id"]).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")
    return user


def require_role(*roles: str) -> Callable[..., User]:
    allowed = ", ".join(roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning("User %s with role %s denied, requires %s", current_user.id, current_user.role, allowed)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Forbidden: Only {allowed} allowed.")
        return current_user

    return dependency


def find_owned_company(db: Session, user_id: int) -> Company | None:
    return db.query(Company).filter(Company.user_id == user_id).first()


def find_admin_link(db: Session, company_id: int, user_id: int) -> CompanyAdmin | None:
    return (
        db.query(CompanyAdmin)
        .filter(CompanyAdmin.company_id == company_id, CompanyAdmin.user_id == user_id)
        .first()
    )


def get_owned_company(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Company:
    company = find_owned_company(db, current_user.id)
    if not company:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No company profile found for this user. Please create a company profile first.",
        )
    return company


def authorize_company(db: Session, user: User, company_id: int, owner_only: bool = False) -> Company:
    """Load a company and check the caller may act on it.

    Ownership is re-read from the database on every call. Linked admins pass
    unless ``owner_only`` is set.
    """
    company = db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found.")
    if company.user_id == user.id:
        return company
    if not owner_only and find_admin_link(db, company_id, user.id):
        return company
    logger.warning("User %s denied access to company %s", user.id, company_id)
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied. You are not an owner or admin for this company.",
    )
