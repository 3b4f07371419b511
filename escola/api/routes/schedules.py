import random
from datetime import date

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, joinedload

from escola.api.deps import get_current_user, get_or_404
from escola.core.config import settings
from escola.core.errors import ConflictError, InvalidScheduleRequestError
from escola.db.session import get_db
from escola.models import SchoolClass, ScheduleEntry, Subject, Teacher
from escola.schemas.schedule import (
    GenerateScheduleIn,
    GenerateScheduleOut,
    ScheduleEntryDetail,
    ScheduleEntryIn,
    ScheduleEntryOut,
    ScheduleEntryUpdate,
    UnplacedPeriod,
)
from escola.services.csv_io import schedule_to_csv
from escola.services.scheduling import DAY_INDEX, DEFAULT_DAYS, DEFAULT_TIME_SLOTS, generate_schedule

router = APIRouter(prefix="/schedules", tags=["schedules"])


def _class_entries(db: Session, class_id: int) -> list[ScheduleEntry]:
    return db.execute(
        select(ScheduleEntry)
        .options(joinedload(ScheduleEntry.subject), joinedload(ScheduleEntry.teacher))
        .where(ScheduleEntry.class_id == class_id)
        .order_by(ScheduleEntry.day_of_week, ScheduleEntry.start_time)
    ).scalars().all()


def _check_free(db: Session, entry: ScheduleEntry) -> None:
    """Manual edits keep the same rules as generation: one lesson per cell for
    the class and for the teacher."""
    same_cell = (
        select(ScheduleEntry.id)
        .where(ScheduleEntry.day_of_week == entry.day_of_week)
        .where(ScheduleEntry.start_time == entry.start_time)
        .where(ScheduleEntry.end_time == entry.end_time)
    )
    if entry.id is not None:
        same_cell = same_cell.where(ScheduleEntry.id != entry.id)

    if db.execute(same_cell.where(ScheduleEntry.class_id == entry.class_id)).first():
        raise ConflictError("class already has a lesson at this time")
    if entry.teacher_id is not None and db.execute(
        same_cell.where(ScheduleEntry.teacher_id == entry.teacher_id)
    ).first():
        raise ConflictError("teacher already has a lesson at this time")


@router.get("/class/{class_id}", response_model=list[ScheduleEntryDetail])
def list_class_schedule(class_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    get_or_404(db, SchoolClass, class_id, "class")
    return _class_entries(db, class_id)


@router.post("/class/{class_id}/generate", response_model=GenerateScheduleOut)
def generate_class_schedule(
    class_id: int,
    payload: GenerateScheduleIn | None = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    payload = payload or GenerateScheduleIn()
    rng = random.Random(payload.seed) if payload.seed is not None else random.Random()

    entries, outcome = generate_schedule(
        db,
        class_id,
        time_slots=[(s.start, s.end) for s in payload.time_slots],
        days=payload.days,
        rng=rng,
        period_minutes=payload.period_minutes or settings.PERIOD_MINUTES,
    )
    return GenerateScheduleOut(
        class_id=class_id,
        requested=outcome.requested,
        complete=outcome.complete,
        placed=[ScheduleEntryOut.model_validate(e) for e in entries],
        unplaced=[UnplacedPeriod(teacher_id=p.teacher_id, subject_id=p.subject_id) for p in outcome.unplaced],
    )


@router.get("/class/{class_id}/export")
def export_class_schedule(class_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    cls = get_or_404(db, SchoolClass, class_id, "class")
    entries = _class_entries(db, class_id)

    # grade padrao + qualquer horario/dia extra que a turma tenha
    slots = sorted(set(DEFAULT_TIME_SLOTS) | {(e.start_time, e.end_time) for e in entries})
    used_days = {e.day_of_week for e in entries}
    days = [d for d, idx in DAY_INDEX.items() if d in DEFAULT_DAYS or idx in used_days]

    lessons = {}
    for e in entries:
        text = e.subject.name
        if e.teacher is not None:
            text = f"{text} - {e.teacher.full_name}"
        lessons[(e.day_of_week, e.start_time, e.end_time)] = text

    content = schedule_to_csv(lessons, days, [DAY_INDEX[d] for d in days], slots)
    filename = f"horario_{cls.name}_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/class/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
def clear_class_schedule(class_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    get_or_404(db, SchoolClass, class_id, "class")
    db.execute(delete(ScheduleEntry).where(ScheduleEntry.class_id == class_id))
    db.commit()
    return None


@router.post("", response_model=ScheduleEntryOut, status_code=status.HTTP_201_CREATED)
def create_entry(payload: ScheduleEntryIn, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    get_or_404(db, SchoolClass, payload.class_id, "class")
    get_or_404(db, Subject, payload.subject_id, "subject")
    if payload.teacher_id is not None:
        get_or_404(db, Teacher, payload.teacher_id, "teacher")

    entry = ScheduleEntry(**payload.model_dump())
    _check_free(db, entry)

    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.get("/{entry_id}", response_model=ScheduleEntryDetail)
def get_entry(entry_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    return get_or_404(db, ScheduleEntry, entry_id, "schedule entry")


@router.patch("/{entry_id}", response_model=ScheduleEntryOut)
def update_entry(entry_id: int, payload: ScheduleEntryUpdate, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    entry = get_or_404(db, ScheduleEntry, entry_id, "schedule entry")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(entry, field, value)

    if entry.end_time <= entry.start_time:
        raise InvalidScheduleRequestError("lesson must end after it starts")
    _check_free(db, entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(entry_id: int, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    db.delete(get_or_404(db, ScheduleEntry, entry_id, "schedule entry"))
    db.commit()
    return None
