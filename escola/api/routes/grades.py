from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from escola.api.deps import get_current_user, get_or_404
from escola.core.errors import ConflictError
from escola.db.session import get_db
from escola.models import Grade, GradingPeriod, SchoolClass, Subject
from escola.schemas.grade import (
    GradeImportIn,
    GradeImportOut,
    GradeIn,
    GradeSheetRowOut,
    GradingPeriodIn,
    GradingPeriodOut,
    UpsertGradesOut,
)
from escola.services.csv_io import grades_to_csv
from escola.services.grades import GradeSheetRow, grade_sheet, import_grade_rows, upsert_grades

router = APIRouter(tags=["grades"])


def _row_out(row: GradeSheetRow) -> GradeSheetRowOut:
    b1, b2, b3, b4 = row.scores
    return GradeSheetRowOut(
        student_id=row.student_id,
        registration_number=row.registration_number,
        student_name=row.student_name,
        bim1=b1,
        bim2=b2,
        bim3=b3,
        bim4=b4,
        average=row.average,
        status=row.status.value,
    )


@router.get("/grades", response_model=list[GradeSheetRowOut])
def get_grade_sheet(
    class_id: int = Query(...),
    subject_id: int = Query(...),
    academic_year: int = Query(..., ge=1900, le=2200),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return [_row_out(r) for r in grade_sheet(db, class_id, subject_id, academic_year)]


@router.put("/grades", response_model=UpsertGradesOut)
def save_grades(payload: list[GradeIn], db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    written = upsert_grades(db, (g.model_dump() for g in payload))
    return UpsertGradesOut(written=written)


@router.post("/grades/import", response_model=GradeImportOut)
def import_grades(payload: GradeImportIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    written, unknown = import_grade_rows(
        db,
        payload.class_id,
        payload.subject_id,
        payload.academic_year,
        (r.model_dump() for r in payload.rows),
    )
    return GradeImportOut(written=written, unknown_registrations=unknown)


@router.get("/grades/export")
def export_grades(
    class_id: int = Query(...),
    subject_id: int = Query(...),
    academic_year: int = Query(..., ge=1900, le=2200),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    rows = grade_sheet(db, class_id, subject_id, academic_year)
    subject = db.get(Subject, subject_id)
    cls = db.get(SchoolClass, class_id)

    filename = f"notas_{subject.code}_{cls.name}_{date.today().isoformat()}.csv"
    return Response(
        content=grades_to_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/grades/{grade_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_grade(grade_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, Grade, grade_id, "grade"))
    db.commit()
    return None


# ----------------------------
# Bimestres
# ----------------------------
@router.get("/grading-periods", response_model=list[GradingPeriodOut])
def list_grading_periods(
    academic_year: int | None = Query(None),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    q = select(GradingPeriod)
    if academic_year is not None:
        q = q.where(GradingPeriod.academic_year == academic_year)
    q = q.order_by(GradingPeriod.academic_year, GradingPeriod.period_type, GradingPeriod.period_number)
    return db.execute(q).scalars().all()


@router.post("/grading-periods", response_model=GradingPeriodOut, status_code=status.HTTP_201_CREATED)
def create_grading_period(payload: GradingPeriodIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    exists = db.execute(
        select(GradingPeriod.id).where(
            GradingPeriod.academic_year == payload.academic_year,
            GradingPeriod.period_type == payload.period_type,
            GradingPeriod.period_number == payload.period_number,
        )
    ).first()
    if exists:
        raise ConflictError("grading period already exists")

    period = GradingPeriod(**payload.model_dump())
    db.add(period)
    db.commit()
    db.refresh(period)
    return period


@router.delete("/grading-periods/{period_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_grading_period(period_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, GradingPeriod, period_id, "grading period"))
    db.commit()
    return None
