from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from escola.api.deps import get_current_user, get_or_404
from escola.core.errors import ConflictError, NotFoundError
from escola.db.session import get_db
from escola.models import SchoolClass, Subject, Teacher, TeacherSubject
from escola.schemas.subject import SubjectRef
from escola.schemas.teacher import (
    AssignmentIn,
    AssignmentOut,
    TeacherIn,
    TeacherOut,
    TeacherUpdate,
)

router = APIRouter(tags=["teachers"])

_TEACHER_FIELDS = ("full_name", "email", "phone", "qualification", "status", "hire_date")


def _to_out(teacher: Teacher) -> TeacherOut:
    # uma disciplina pode aparecer em varias turmas: lista sem repetir
    seen = {}
    for a in teacher.assignments:
        seen.setdefault(a.subject.id, a.subject)

    return TeacherOut(
        id=teacher.id,
        **{f: getattr(teacher, f) for f in _TEACHER_FIELDS},
        subjects=[SubjectRef.model_validate(s) for s in sorted(seen.values(), key=lambda s: s.name)],
    )


def _load(db: Session, teacher_id: int) -> Teacher:
    teacher = db.execute(
        select(Teacher)
        .options(selectinload(Teacher.assignments).selectinload(TeacherSubject.subject))
        .where(Teacher.id == teacher_id)
    ).scalar_one_or_none()
    if teacher is None:
        raise NotFoundError("teacher not found")
    return teacher


def _replace_general_subjects(db: Session, teacher_id: int, subject_ids: list[int]) -> None:
    """Troca as disciplinas "gerais" (sem turma); atribuicoes por turma ficam."""
    for sid in set(subject_ids):
        get_or_404(db, Subject, sid, "subject")

    db.execute(
        delete(TeacherSubject)
        .where(TeacherSubject.teacher_id == teacher_id)
        .where(TeacherSubject.class_id.is_(None))
    )
    db.add_all(
        TeacherSubject(teacher_id=teacher_id, subject_id=sid) for sid in sorted(set(subject_ids))
    )


@router.get("/teachers", response_model=list[TeacherOut])
def list_teachers(db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    teachers = db.execute(
        select(Teacher)
        .options(selectinload(Teacher.assignments).selectinload(TeacherSubject.subject))
        .order_by(Teacher.full_name)
    ).scalars().all()
    return [_to_out(t) for t in teachers]


@router.post("/teachers", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(payload: TeacherIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    if db.execute(select(Teacher.id).where(Teacher.email == payload.email)).first():
        raise ConflictError("email already exists")

    teacher = Teacher(**payload.model_dump(exclude={"subject_ids"}))
    db.add(teacher)
    db.flush()

    if payload.subject_ids:
        _replace_general_subjects(db, teacher.id, payload.subject_ids)

    db.commit()
    db.expire_all()
    return _to_out(_load(db, teacher.id))


@router.get("/teachers/{teacher_id}", response_model=TeacherOut)
def get_teacher(teacher_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return _to_out(_load(db, teacher_id))


@router.patch("/teachers/{teacher_id}", response_model=TeacherOut)
def update_teacher(teacher_id: int, payload: TeacherUpdate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    teacher = get_or_404(db, Teacher, teacher_id, "teacher")
    changes = payload.model_dump(exclude_unset=True, exclude={"subject_ids"})
    for field, value in changes.items():
        setattr(teacher, field, value)

    if payload.subject_ids is not None:
        _replace_general_subjects(db, teacher_id, payload.subject_ids)

    db.commit()
    db.expire_all()
    return _to_out(_load(db, teacher_id))


@router.delete("/teachers/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_teacher(teacher_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, Teacher, teacher_id, "teacher"))
    db.commit()
    return None


# ----------------------------
# Atribuicoes professor/disciplina/turma (entrada da geracao de horarios)
# ----------------------------
@router.get("/teacher-subjects", response_model=list[AssignmentOut])
def list_assignments(
    class_id: int | None = Query(None),
    teacher_id: int | None = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    q = select(TeacherSubject)
    if class_id is not None:
        q = q.where(TeacherSubject.class_id == class_id)
    if teacher_id is not None:
        q = q.where(TeacherSubject.teacher_id == teacher_id)
    return db.execute(q.order_by(TeacherSubject.id)).scalars().all()


@router.post("/teacher-subjects", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
def create_assignment(payload: AssignmentIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    get_or_404(db, Teacher, payload.teacher_id, "teacher")
    get_or_404(db, Subject, payload.subject_id, "subject")
    if payload.class_id is not None:
        get_or_404(db, SchoolClass, payload.class_id, "class")

    exists = db.execute(
        select(TeacherSubject.id).where(
            TeacherSubject.teacher_id == payload.teacher_id,
            TeacherSubject.subject_id == payload.subject_id,
            TeacherSubject.class_id.is_(None)
            if payload.class_id is None
            else TeacherSubject.class_id == payload.class_id,
        )
    ).first()
    if exists:
        raise ConflictError("assignment already exists")

    assignment = TeacherSubject(**payload.model_dump())
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


@router.delete("/teacher-subjects/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(assignment_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, TeacherSubject, assignment_id, "assignment"))
    db.commit()
    return None
