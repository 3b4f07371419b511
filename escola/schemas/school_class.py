from typing import Literal

from pydantic import BaseModel, Field

from escola.schemas.teacher import TeacherRef

Shift = Literal["manha", "tarde", "noite", "integral"]


class ClassIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    year: int = Field(..., ge=1900, le=2200)
    shift: Shift = "manha"
    level: str | None = Field(default=None, max_length=40)
    room: str | None = Field(default=None, max_length=60)
    max_capacity: int | None = Field(default=None, ge=0)
    teacher_id: int | None = None


class ClassUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=60)
    year: int | None = Field(default=None, ge=1900, le=2200)
    shift: Shift | None = None
    level: str | None = Field(default=None, max_length=40)
    room: str | None = Field(default=None, max_length=60)
    max_capacity: int | None = Field(default=None, ge=0)
    teacher_id: int | None = None


class ClassOut(BaseModel):
    id: int
    name: str
    year: int
    shift: str
    level: str | None
    room: str | None
    max_capacity: int | None
    teacher_id: int | None
    teacher: TeacherRef | None = None
    enrolled_count: int = 0

    class Config:
        from_attributes = True
