from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from escola.api.deps import get_current_user, get_or_404
from escola.core.errors import ConflictError
from escola.db.session import get_db
from escola.models import Subject
from escola.schemas.subject import SubjectIn, SubjectOut, SubjectUpdate

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("", response_model=list[SubjectOut])
def list_subjects(db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return db.execute(select(Subject).order_by(Subject.name)).scalars().all()


@router.post("", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    if db.execute(select(Subject.id).where(Subject.code == payload.code)).first():
        raise ConflictError("subject code already exists")

    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return get_or_404(db, Subject, subject_id, "subject")


@router.patch("/{subject_id}", response_model=SubjectOut)
def update_subject(subject_id: int, payload: SubjectUpdate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    subject = get_or_404(db, Subject, subject_id, "subject")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(subject, field, value)

    db.commit()
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(subject_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, Subject, subject_id, "subject"))
    db.commit()
    return None
