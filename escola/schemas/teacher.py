from datetime import date

from pydantic import BaseModel, Field

from escola.schemas.subject import SubjectRef


class TeacherIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=120)
    phone: str | None = Field(default=None, max_length=30)
    qualification: str | None = Field(default=None, max_length=120)
    status: str | None = Field(default="active", max_length=20)
    hire_date: date | None = None

    # disciplinas que o professor leciona (sem turma)
    subject_ids: list[int] | None = None


class TeacherUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=120)
    email: str | None = Field(default=None, min_length=3, max_length=120)
    phone: str | None = Field(default=None, max_length=30)
    qualification: str | None = Field(default=None, max_length=120)
    status: str | None = Field(default=None, max_length=20)
    hire_date: date | None = None

    # None = nao mexe; lista (mesmo vazia) substitui
    subject_ids: list[int] | None = None


class TeacherOut(BaseModel):
    id: int
    full_name: str
    email: str
    phone: str | None
    qualification: str | None
    status: str | None
    hire_date: date | None
    subjects: list[SubjectRef] = []


class TeacherRef(BaseModel):
    id: int
    full_name: str

    class Config:
        from_attributes = True


class AssignmentIn(BaseModel):
    teacher_id: int
    subject_id: int
    class_id: int | None = None


class AssignmentOut(BaseModel):
    id: int
    teacher_id: int
    subject_id: int
    class_id: int | None

    class Config:
        from_attributes = True
