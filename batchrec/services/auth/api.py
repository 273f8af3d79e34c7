from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from batchrec.core.security import (
    Principal,
    create_access_token,
    hash_password,
    require_user,
    verify_password,
)
from batchrec.db.models.auth import User
from batchrec.db.session import get_db
from batchrec.services._crud import commit_refresh

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterIn(BaseModel):
    email: EmailStr
    password: str
    full_name: str | None = ""


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/register", response_model=TokenOut)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if len(payload.password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")

    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=409, detail="Email already registered")

    user = commit_refresh(db, User(
        email=payload.email,
        full_name=payload.full_name or "",
        password_hash=hash_password(payload.password),
    ))
    logger.info("registered user %s", user.email)
    return TokenOut(access_token=create_access_token(user))


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")
    return TokenOut(access_token=create_access_token(user))


@router.get("/me")
def me(principal: Principal = Depends(require_user)):
    return {"user_id": principal.user_id, "email": principal.username}
