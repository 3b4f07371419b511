from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, model_validator

Score = float | None


class GradeIn(BaseModel):
    student_id: int
    subject_id: int
    grading_period_id: int
    score: Score = Field(default=None, ge=0, le=10)


class UpsertGradesOut(BaseModel):
    written: int


class GradeSheetRowOut(BaseModel):
    student_id: int
    registration_number: str
    student_name: str
    bim1: Score
    bim2: Score
    bim3: Score
    bim4: Score
    average: Score
    status: Literal["approved", "failed", "pending"]


class GradeImportRow(BaseModel):
    registration_number: str = Field(..., min_length=1)
    student_name: str | None = None
    bim1: Score = Field(default=None, ge=0, le=10)
    bim2: Score = Field(default=None, ge=0, le=10)
    bim3: Score = Field(default=None, ge=0, le=10)
    bim4: Score = Field(default=None, ge=0, le=10)


class GradeImportIn(BaseModel):
    class_id: int
    subject_id: int
    academic_year: int = Field(..., ge=1900, le=2200)
    rows: list[GradeImportRow] = Field(..., min_length=1)


class GradeImportOut(BaseModel):
    written: int
    unknown_registrations: list[str]


class GradingPeriodIn(BaseModel):
    academic_year: int = Field(..., ge=1900, le=2200)
    period_number: int = Field(..., ge=1, le=4)
    period_type: Literal["bimonthly", "semestral"] = "bimonthly"
    name: str = Field(..., min_length=1, max_length=60)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date before start_date")
        return self


class GradingPeriodOut(BaseModel):
    id: int
    academic_year: int
    period_number: int
    period_type: str
    name: str
    start_date: date
    end_date: date

    class Config:
        from_attributes = True
