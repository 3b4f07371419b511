from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from escola.api.deps import get_current_user, get_or_404
from escola.core.errors import ConflictError
from escola.db.session import get_db
from escola.models import Enrollment, Student
from escola.schemas.student import (
    EnrollmentIn,
    EnrollmentOut,
    StudentIn,
    StudentOut,
    StudentUpdate,
)

router = APIRouter(tags=["students"])


def _check_registration(db: Session, registration_number: str, student_id: int | None = None):
    q = select(Student.id).where(Student.registration_number == registration_number)
    if student_id is not None:
        q = q.where(Student.id != student_id)
    if db.execute(q).first():
        raise ConflictError("registration number already exists")


@router.get("/students", response_model=list[StudentOut])
def list_students(
    class_id: int | None = Query(None, description="Filtro por turma"),
    name: str | None = Query(None, description="Busca parcial pelo nome"),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    q = select(Student).options(joinedload(Student.school_class))
    if class_id is not None:
        q = q.where(Student.class_id == class_id)
    if name:
        q = q.where(Student.full_name.ilike(f"%{name}%"))

    return db.execute(q.order_by(Student.full_name)).scalars().all()


@router.post("/students", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    _check_registration(db, payload.registration_number)

    student = Student(**payload.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


@router.get("/students/{student_id}", response_model=StudentOut)
def get_student(student_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return get_or_404(db, Student, student_id, "student")


@router.patch("/students/{student_id}", response_model=StudentOut)
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    student = get_or_404(db, Student, student_id, "student")
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("registration_number"):
        _check_registration(db, changes["registration_number"], student_id)

    for field, value in changes.items():
        setattr(student, field, value)

    db.commit()
    db.refresh(student)
    return student


@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, Student, student_id, "student"))
    db.commit()
    return None


# ----------------------------
# Matriculas
# ----------------------------
@router.get("/enrollments", response_model=list[EnrollmentOut])
def list_enrollments(
    class_id: int | None = Query(None),
    student_id: int | None = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    q = select(Enrollment)
    if class_id is not None:
        q = q.where(Enrollment.class_id == class_id)
    if student_id is not None:
        q = q.where(Enrollment.student_id == student_id)
    return db.execute(q.order_by(Enrollment.id)).scalars().all()


@router.post("/enrollments", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def create_enrollment(payload: EnrollmentIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    get_or_404(db, Student, payload.student_id, "student")

    enrollment = Enrollment(**payload.model_dump())
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment


@router.delete("/enrollments/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_enrollment(enrollment_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, Enrollment, enrollment_id, "enrollment"))
    db.commit()
    return None
