from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, model_validator

EventType = Literal["holiday", "exam", "meeting", "deadline", "event", "other"]


class CalendarEventIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=160)
    description: str | None = None
    start_date: date
    end_date: date | None = None
    event_type: EventType = "other"
    all_day: bool = True

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date before start_date")
        return self


class CalendarEventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=160)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    event_type: EventType | None = None
    all_day: bool | None = None


class CalendarEventOut(BaseModel):
    id: int
    title: str
    description: str | None
    start_date: date
    end_date: date | None
    event_type: str
    all_day: bool

    class Config:
        from_attributes = True
