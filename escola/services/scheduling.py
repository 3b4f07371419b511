"""Automatic weekly schedule generation for a class.

Every teacher/subject assignment of the class needs a number of weekly
lessons (derived from the subject's workload). Those lessons are shuffled and
dropped one by one into the first free (day, time slot) cell, never putting
a teacher or the class in two places at once. Lessons that find no free cell
come back in ``ScheduleOutcome.unplaced``.

The pure part (``periods_needed``, ``expand_pending``, ``build_cells``,
``allocate``) has no database access; ``generate_schedule`` wires it to the
session and replaces the class's entries in a single transaction.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from escola.core.errors import (
    InvalidScheduleRequestError,
    NotFoundError,
    NothingToScheduleError,
    StorageError,
)
from escola.core.logging import get_logger
from escola.models import SchoolClass, ScheduleEntry, TeacherSubject

logger = get_logger(__name__)

DEFAULT_PERIOD_MINUTES = 50
DEFAULT_WORKLOAD_MINUTES = 60
MIN_PERIODS_PER_SUBJECT = 2

DAY_INDEX: Dict[str, int] = {
    "Segunda": 0,
    "Terça": 1,
    "Quarta": 2,
    "Quinta": 3,
    "Sexta": 4,
    "Sábado": 5,
    "Domingo": 6,
}
DEFAULT_DAYS = ["Segunda", "Terça", "Quarta", "Quinta", "Sexta"]

DEFAULT_TIME_SLOTS: List[Tuple[str, str]] = [
    ("07:00", "07:50"),
    ("07:50", "08:40"),
    ("08:50", "09:40"),
    ("09:40", "10:30"),
    ("10:40", "11:30"),
    ("11:30", "12:20"),
]

CellKey = Tuple[int, str, str]  # (day_index, start, end)


@dataclass(frozen=True)
class Cell:
    day_index: int
    start: str
    end: str

    @property
    def key(self) -> CellKey:
        return (self.day_index, self.start, self.end)


@dataclass(frozen=True)
class PendingPeriod:
    teacher_id: int
    subject_id: int


@dataclass(frozen=True)
class PlacedPeriod:
    period: PendingPeriod
    cell: Cell


@dataclass
class ScheduleOutcome:
    placed: List[PlacedPeriod] = field(default_factory=list)
    unplaced: List[PendingPeriod] = field(default_factory=list)

    @property
    def requested(self) -> int:
        return len(self.placed) + len(self.unplaced)

    @property
    def complete(self) -> bool:
        return not self.unplaced


def day_index(day: str) -> int:
    try:
        return DAY_INDEX[day.strip()]
    except KeyError:
        raise InvalidScheduleRequestError(
            f"unknown day {day!r}, expected one of {', '.join(DAY_INDEX)}"
        ) from None


def periods_needed(
    workload_minutes: Optional[int],
    period_minutes: int = DEFAULT_PERIOD_MINUTES,
    max_periods: Optional[int] = None,
) -> int:
    """Weekly lessons for a workload: ceil(workload / period), at least 2.

    ``max_periods`` (the number of cells in the grid) caps the result, but
    the floor of 2 wins even over a smaller grid.
    """
    if period_minutes <= 0:
        raise InvalidScheduleRequestError("period_minutes must be positive")
    if workload_minutes is None:
        workload_minutes = DEFAULT_WORKLOAD_MINUTES

    periods = math.ceil(workload_minutes / period_minutes)
    if max_periods is not None:
        periods = min(periods, max_periods)
    return max(MIN_PERIODS_PER_SUBJECT, periods)


def build_cells(days: Sequence[str], time_slots: Sequence[Tuple[str, str]]) -> List[Cell]:
    """All (day, slot) cells, day-major, in the order given."""
    if not days:
        raise InvalidScheduleRequestError("days must not be empty")
    if not time_slots:
        raise InvalidScheduleRequestError("time_slots must not be empty")

    return [
        Cell(day_index(day), start, end)
        for day in days
        for start, end in time_slots
    ]


def expand_pending(
    assignments: Iterable[Tuple[int, int, Optional[int]]],
    cell_count: int,
    period_minutes: int = DEFAULT_PERIOD_MINUTES,
) -> List[PendingPeriod]:
    """One PendingPeriod per required lesson.

    ``assignments`` yields (teacher_id, subject_id, workload_minutes).
    """
    pending: List[PendingPeriod] = []
    for teacher_id, subject_id, workload in assignments:
        n = periods_needed(workload, period_minutes, max_periods=cell_count)
        pending.extend(PendingPeriod(teacher_id, subject_id) for _ in range(n))
    return pending


def allocate(
    pending: Sequence[PendingPeriod],
    cells: Sequence[Cell],
    rng: Optional[random.Random] = None,
    teacher_busy: Optional[Dict[int, Set[CellKey]]] = None,
) -> ScheduleOutcome:
    """Shuffle ``pending`` and give each one the first free cell.

    A cell is free when the class hasn't used it in this run and the
    teacher isn't busy there (``teacher_busy`` may carry the teacher's
    lessons in other classes). ``pending`` is not modified.
    """
    rng = rng or random.Random()
    order = list(pending)
    rng.shuffle(order)

    busy: Dict[int, Set[CellKey]] = {t: set(keys) for t, keys in (teacher_busy or {}).items()}
    class_used: Set[CellKey] = set()
    outcome = ScheduleOutcome()

    for period in order:
        teacher_cells = busy.setdefault(period.teacher_id, set())
        for cell in cells:
            key = cell.key
            if key in class_used or key in teacher_cells:
                continue
            class_used.add(key)
            teacher_cells.add(key)
            outcome.placed.append(PlacedPeriod(period, cell))
            break
        else:
            outcome.unplaced.append(period)

    return outcome


def _teacher_busy_elsewhere(
    db: Session, class_id: int, teacher_ids: Set[int]
) -> Dict[int, Set[CellKey]]:
    if not teacher_ids:
        return {}
    rows = db.execute(
        select(
            ScheduleEntry.teacher_id,
            ScheduleEntry.day_of_week,
            ScheduleEntry.start_time,
            ScheduleEntry.end_time,
        )
        .where(ScheduleEntry.teacher_id.in_(teacher_ids))
        .where(ScheduleEntry.class_id != class_id)
    ).all()

    busy: Dict[int, Set[CellKey]] = {}
    for teacher_id, day, start, end in rows:
        busy.setdefault(teacher_id, set()).add((day, start, end))
    return busy


def generate_schedule(
    db: Session,
    class_id: int,
    time_slots: Sequence[Tuple[str, str]] = DEFAULT_TIME_SLOTS,
    days: Sequence[str] = DEFAULT_DAYS,
    rng: Optional[random.Random] = None,
    period_minutes: int = DEFAULT_PERIOD_MINUTES,
) -> Tuple[List[ScheduleEntry], ScheduleOutcome]:
    """Replace the weekly schedule of ``class_id`` with a generated one.

    Raises NotFoundError when the class doesn't exist and
    NothingToScheduleError when it has no assignments; neither touches the
    stored schedule. The delete of the old entries and the insert of the new
    ones are committed together, so a storage failure leaves the previous
    schedule in place (StorageError).
    """
    cells = build_cells(days, time_slots)

    school_class = db.get(SchoolClass, class_id)
    if school_class is None:
        raise NotFoundError("class not found")
    room = school_class.room or None

    assignments = db.execute(
        select(TeacherSubject)
        .options(joinedload(TeacherSubject.subject))
        .where(TeacherSubject.class_id == class_id)
        .order_by(TeacherSubject.id)
    ).scalars().all()

    if not assignments:
        raise NothingToScheduleError(
            "no subjects found for this class; assign subjects and teachers to the class first"
        )

    pending = expand_pending(
        ((a.teacher_id, a.subject_id, a.subject.workload_minutes) for a in assignments),
        cell_count=len(cells),
        period_minutes=period_minutes,
    )
    busy = _teacher_busy_elsewhere(db, class_id, {a.teacher_id for a in assignments})
    outcome = allocate(pending, cells, rng=rng, teacher_busy=busy)

    entries = [
        ScheduleEntry(
            class_id=class_id,
            subject_id=p.period.subject_id,
            teacher_id=p.period.teacher_id,
            day_of_week=p.cell.day_index,
            start_time=p.cell.start,
            end_time=p.cell.end,
            room=room,
        )
        for p in outcome.placed
    ]

    try:
        db.execute(delete(ScheduleEntry).where(ScheduleEntry.class_id == class_id))
        db.add_all(entries)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("schedule_replace_failed", class_id=class_id, error=str(exc))
        raise StorageError("could not save the generated schedule") from exc

    for e in entries:
        db.refresh(e)

    log = logger.warning if outcome.unplaced else logger.info
    log(
        "schedule_generated",
        class_id=class_id,
        requested=outcome.requested,
        placed=len(outcome.placed),
        unplaced=len(outcome.unplaced),
        cells=len(cells),
    )
    return entries, outcome
