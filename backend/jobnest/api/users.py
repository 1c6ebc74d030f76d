from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from jobnest.auth import create_access_token, find_owned_company, get_current_user, hash_password, verify_password
from jobnest.database import get_db
from jobnest.models.user import User
from jobnest.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserOut


logger = logging.getLogger(__name__)

router = APIRouter()

SELF_SERVICE_ROLES = ("user", "company")


def _authenticate(db: Session, payload: LoginRequest) -> User:
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password.")
    return user


def _touch_login(db: Session, user: User) -> None:
    user.last_login = datetime.now(timezone.utc)
    db.add(user)
    db.commit()
    db.refresh(user)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered.")

    role = payload.role if payload.role in SELF_SERVICE_ROLES else "user"
    user = User(email=payload.email, password_hash=hash_password(payload.password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role)

    return AuthResponse(
        message="User registered successfully.",
        token=create_access_token(user),
        user=UserOut.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    user = _authenticate(db, payload)
    _touch_login(db, user)
    company = find_owned_company(db, user.id) if user.role == "company" else None
    return AuthResponse(
        message="Login successful.",
        token=create_access_token(user, company_id=company.id if company else None),
        user=UserOut.model_validate(user),
    )


@router.post("/company-login", response_model=AuthResponse)
def company_login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    user = _authenticate(db, payload)
    if user.role != "company":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This account is not registered as a company. Please use the job seeker login.",
        )
    _touch_login(db, user)
    company = find_owned_company(db, user.id)
    return AuthResponse(
        message="Login successful.",
        token=create_access_token(user, company_id=company.id if company else None),
        user=UserOut.model_validate(user),
    )


@router.get("")
def list_users(db: Session = Depends(get_db)) -> dict:
    users = db.query(User).order_by(User.id).all()
    return {
        "message": "Users retrieved successfully.",
        "count": len(users),
        "users": [UserOut.model_validate(user) for user in users],
    }


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
