from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from escola.api.deps import get_current_user, get_or_404
from escola.db.session import get_db
from escola.models import Enrollment, SchoolClass, Teacher
from escola.schemas.school_class import ClassIn, ClassOut, ClassUpdate

router = APIRouter(prefix="/classes", tags=["classes"])


def _enrolled_counts(db: Session, class_ids: list[int]) -> dict[int, int]:
    if not class_ids:
        return {}
    rows = db.execute(
        select(Enrollment.class_id, func.count(Enrollment.id))
        .where(Enrollment.class_id.in_(class_ids))
        .where(Enrollment.status == "enrolled")
        .group_by(Enrollment.class_id)
    ).all()
    return {class_id: count for class_id, count in rows}


def _to_out(cls: SchoolClass, enrolled: int) -> ClassOut:
    out = ClassOut.model_validate(cls)
    out.enrolled_count = enrolled
    return out


@router.get("", response_model=list[ClassOut])
def list_classes(db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    classes = db.execute(
        select(SchoolClass).options(joinedload(SchoolClass.teacher)).order_by(SchoolClass.name)
    ).scalars().all()

    counts = _enrolled_counts(db, [c.id for c in classes])
    return [_to_out(c, counts.get(c.id, 0)) for c in classes]


@router.post("", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
def create_class(payload: ClassIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    if payload.teacher_id is not None:
        get_or_404(db, Teacher, payload.teacher_id, "teacher")

    cls = SchoolClass(**payload.model_dump())
    db.add(cls)
    db.commit()
    db.refresh(cls)
    return _to_out(cls, 0)


@router.get("/{class_id}", response_model=ClassOut)
def get_class(class_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    cls = get_or_404(db, SchoolClass, class_id, "class")
    return _to_out(cls, _enrolled_counts(db, [class_id]).get(class_id, 0))


@router.patch("/{class_id}", response_model=ClassOut)
def update_class(class_id: int, payload: ClassUpdate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    cls = get_or_404(db, SchoolClass, class_id, "class")
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("teacher_id") is not None:
        get_or_404(db, Teacher, changes["teacher_id"], "teacher")

    for field, value in changes.items():
        setattr(cls, field, value)

    db.commit()
    db.refresh(cls)
    return _to_out(cls, _enrolled_counts(db, [class_id]).get(class_id, 0))


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_class(class_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, SchoolClass, class_id, "class"))
    db.commit()
    return None
