from pydantic import BaseModel, Field, field_validator, model_validator

from escola.schemas.subject import SubjectRef
from escola.schemas.teacher import TeacherRef
from escola.services.scheduling import DAY_INDEX, DEFAULT_DAYS, DEFAULT_TIME_SLOTS

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class TimeSlot(BaseModel):
    start: str = Field(..., pattern=HHMM)
    end: str = Field(..., pattern=HHMM)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end <= self.start:
            raise ValueError("time slot must end after it starts")
        return self


class GenerateScheduleIn(BaseModel):
    time_slots: list[TimeSlot] = Field(
        default_factory=lambda: [TimeSlot(start=s, end=e) for s, e in DEFAULT_TIME_SLOTS],
        min_length=1,
    )
    days: list[str] = Field(default_factory=lambda: list(DEFAULT_DAYS), min_length=1)

    # sem seed = ordem aleatoria a cada chamada
    seed: int | None = None
    period_minutes: int | None = Field(default=None, gt=0, le=240)

    @field_validator("days")
    @classmethod
    def _known_days(cls, days: list[str]):
        days = [d.strip() for d in days]
        unknown = [d for d in days if d not in DAY_INDEX]
        if unknown:
            raise ValueError(f"unknown days: {unknown}")
        if len(set(days)) != len(days):
            raise ValueError("repeated days")
        return days

    @field_validator("time_slots")
    @classmethod
    def _distinct_slots(cls, slots: list[TimeSlot]):
        keys = [(s.start, s.end) for s in slots]
        if len(set(keys)) != len(keys):
            raise ValueError("repeated time slots")
        return slots


class ScheduleEntryIn(BaseModel):
    class_id: int
    subject_id: int
    teacher_id: int | None = None
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str = Field(..., pattern=HHMM)
    end_time: str = Field(..., pattern=HHMM)
    room: str | None = Field(default=None, max_length=60)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("lesson must end after it starts")
        return self


class ScheduleEntryUpdate(BaseModel):
    subject_id: int | None = None
    teacher_id: int | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: str | None = Field(default=None, pattern=HHMM)
    end_time: str | None = Field(default=None, pattern=HHMM)
    room: str | None = Field(default=None, max_length=60)


class ScheduleEntryOut(BaseModel):
    id: int
    class_id: int
    subject_id: int
    teacher_id: int | None
    day_of_week: int
    start_time: str
    end_time: str
    room: str | None

    class Config:
        from_attributes = True


class ScheduleEntryDetail(ScheduleEntryOut):
    subject: SubjectRef | None = None
    teacher: TeacherRef | None = None


class UnplacedPeriod(BaseModel):
    teacher_id: int
    subject_id: int


class GenerateScheduleOut(BaseModel):
    class_id: int
    requested: int
    complete: bool
    placed: list[ScheduleEntryOut]
    unplaced: list[UnplacedPeriod]
