from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from escola.core.errors import NotFoundError
from escola.core.logging import get_logger
from escola.models import Grade, GradingPeriod, SchoolClass, Student, Subject

logger = get_logger(__name__)

BIMESTERS = 4
APPROVAL_AVERAGE = 7.0
FAIL_BELOW = 5.0


class GradeStatus(str, enum.Enum):
    APPROVED = "approved"
    FAILED = "failed"
    PENDING = "pending"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    GradeStatus.APPROVED: "Aprovado",
    GradeStatus.FAILED: "Reprovado",
    GradeStatus.PENDING: "Pendente",
}


@dataclass(frozen=True)
class GradeSummary:
    average: Optional[float]
    status: GradeStatus


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_average_and_status(scores: Sequence[Optional[float]]) -> GradeSummary:
    """Average of the non-null bimester scores and the resulting status.

    The status only leaves "pending" once all four bimesters have a score:
    7 or more approves, below 5 fails, and the 5..7 band stays pending
    (recuperacao).
    """
    present = [s for s in scores if s is not None]
    if not present:
        return GradeSummary(None, GradeStatus.PENDING)

    raw = sum(present) / len(present)
    average = round_half_up(raw)

    if len(present) < BIMESTERS:
        return GradeSummary(average, GradeStatus.PENDING)

    if raw >= APPROVAL_AVERAGE:
        status = GradeStatus.APPROVED
    elif raw < FAIL_BELOW:
        status = GradeStatus.FAILED
    else:
        status = GradeStatus.PENDING
    return GradeSummary(average, status)


@dataclass
class GradeSheetRow:
    student_id: int
    registration_number: str
    student_name: str
    scores: List[Optional[float]]
    average: Optional[float]
    status: GradeStatus


def bimonthly_periods(db: Session, academic_year: int) -> List[GradingPeriod]:
    return list(
        db.execute(
            select(GradingPeriod)
            .where(GradingPeriod.academic_year == academic_year)
            .where(GradingPeriod.period_type == "bimonthly")
            .order_by(GradingPeriod.period_number)
        ).scalars().all()
    )


def grade_sheet(
    db: Session, class_id: int, subject_id: int, academic_year: int
) -> List[GradeSheetRow]:
    """One row per student of the class, scores ordered by bimester number."""
    if db.get(SchoolClass, class_id) is None:
        raise NotFoundError("class not found")
    if db.get(Subject, subject_id) is None:
        raise NotFoundError("subject not found")

    students = db.execute(
        select(Student).where(Student.class_id == class_id).order_by(Student.full_name)
    ).scalars().all()
    periods = bimonthly_periods(db, academic_year)
    if not students or not periods:
        return []

    period_slot = {p.id: i for i, p in enumerate(periods[:BIMESTERS])}
    grades = db.execute(
        select(Grade)
        .where(Grade.subject_id == subject_id)
        .where(Grade.student_id.in_([s.id for s in students]))
        .where(Grade.grading_period_id.in_(list(period_slot)))
    ).scalars().all()

    by_student: Dict[int, List[Optional[float]]] = {s.id: [None] * BIMESTERS for s in students}
    for g in grades:
        by_student[g.student_id][period_slot[g.grading_period_id]] = g.score

    rows = []
    for s in students:
        scores = by_student[s.id]
        summary = calculate_average_and_status(scores)
        rows.append(
            GradeSheetRow(
                student_id=s.id,
                registration_number=s.registration_number,
                student_name=s.full_name,
                scores=scores,
                average=summary.average,
                status=summary.status,
            )
        )
    return rows


def upsert_grades(db: Session, items: Iterable[dict]) -> int:
    """Insert or update grades keyed by (student_id, subject_id, grading_period_id).

    Items with a null score are skipped, the stored score is kept. Returns
    how many rows were written. Commits once at the end.
    """
    # mesma chave repetida no lote: vale a ultima
    latest: Dict[tuple, float] = {}
    for item in items:
        if item.get("score") is None:
            continue
        key = (item["student_id"], item["subject_id"], item["grading_period_id"])
        latest[key] = item["score"]

    for (student_id, subject_id, period_id), score in latest.items():
        grade = db.execute(
            select(Grade).where(
                Grade.student_id == student_id,
                Grade.subject_id == subject_id,
                Grade.grading_period_id == period_id,
            )
        ).scalar_one_or_none()

        if grade:
            grade.score = score
        else:
            db.add(
                Grade(
                    student_id=student_id,
                    subject_id=subject_id,
                    grading_period_id=period_id,
                    score=score,
                )
            )

    written = len(latest)

    db.commit()
    logger.info("grades_upserted", written=written)
    return written


def import_grade_rows(
    db: Session,
    class_id: int,
    subject_id: int,
    academic_year: int,
    rows: Iterable[dict],
) -> tuple[int, List[str]]:
    """Upsert bimester scores given by registration number.

    ``rows`` carry ``registration_number`` and ``bim1``..``bim4``. Students
    outside the class are not touched; their registration numbers come back
    in the second element of the result.
    """
    if db.get(SchoolClass, class_id) is None:
        raise NotFoundError("class not found")
    if db.get(Subject, subject_id) is None:
        raise NotFoundError("subject not found")

    periods = bimonthly_periods(db, academic_year)
    if not periods:
        raise NotFoundError(f"no bimonthly grading periods for {academic_year}")
    period_by_number = {p.period_number: p.id for p in periods}

    students = db.execute(
        select(Student.registration_number, Student.id).where(Student.class_id == class_id)
    ).all()
    student_by_reg = {reg: sid for reg, sid in students}

    items: List[dict] = []
    unknown: List[str] = []
    for row in rows:
        reg = str(row["registration_number"]).strip()
        student_id = student_by_reg.get(reg)
        if student_id is None:
            unknown.append(reg)
            continue
        for number in range(1, BIMESTERS + 1):
            period_id = period_by_number.get(number)
            if period_id is None:
                continue
            items.append(
                {
                    "student_id": student_id,
                    "subject_id": subject_id,
                    "grading_period_id": period_id,
                    "score": row.get(f"bim{number}"),
                }
            )

    if unknown:
        logger.warning("grade_import_unknown_students", class_id=class_id, registrations=unknown)
    return upsert_grades(db, items), unknown
