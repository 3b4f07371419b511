from typing import Type, TypeVar

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from escola.core.config import settings
from escola.core.errors import NotFoundError
from escola.core.security import verify
from escola.services.notifications import NotificationCenter

bearer_scheme = HTTPBearer(auto_error=False)

ModelT = TypeVar("ModelT")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
):
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing bearer token")

    payload = verify(credentials.credentials, settings.AUTH_SECRET)
    if not payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid or expired token")

    return payload


def get_notifications(request: Request) -> NotificationCenter:
    return request.app.state.notifications


def get_or_404(db: Session, model: Type[ModelT], obj_id: int, label: str) -> ModelT:
    obj = db.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj
