from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from escola.core.config import settings
from escola.core.security import sign
from escola.db.session import get_db
from escola.models import User
from escola.schemas.auth import LoginIn, LoginOut

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = db.execute(select(User).where(User.username == payload.username)).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials")

    token = sign(
        {"sub": user.username, "role": user.role},
        secret=settings.AUTH_SECRET,
        ttl_seconds=settings.TOKEN_TTL_SECONDS,
    )
    return LoginOut(access_token=token)
