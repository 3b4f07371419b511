from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

StudentStatus = Literal["active", "inactive", "graduated", "transferred"]
EnrollmentStatus = Literal["enrolled", "pending", "cancelled", "completed"]


class StudentIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=120)
    registration_number: str = Field(..., min_length=1, max_length=30)
    birth_date: date | None = None
    email: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=255)
    parent_name: str | None = Field(default=None, max_length=120)
    parent_email: str | None = Field(default=None, max_length=120)
    parent_phone: str | None = Field(default=None, max_length=30)
    class_id: int | None = None
    status: StudentStatus = "active"


class StudentUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=120)
    registration_number: str | None = Field(default=None, min_length=1, max_length=30)
    birth_date: date | None = None
    email: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=255)
    parent_name: str | None = Field(default=None, max_length=120)
    parent_email: str | None = Field(default=None, max_length=120)
    parent_phone: str | None = Field(default=None, max_length=30)
    class_id: int | None = None
    status: StudentStatus | None = None


class ClassRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class StudentOut(BaseModel):
    id: int
    full_name: str
    registration_number: str
    birth_date: date | None
    email: str | None
    phone: str | None
    address: str | None
    parent_name: str | None
    parent_email: str | None
    parent_phone: str | None
    class_id: int | None
    status: str
    school_class: ClassRef | None = None

    class Config:
        from_attributes = True


class EnrollmentIn(BaseModel):
    student_id: int
    class_id: int
    academic_year: int = Field(..., ge=1900, le=2200)
    status: EnrollmentStatus = "enrolled"
    enrollment_date: date | None = None


class EnrollmentOut(BaseModel):
    id: int
    student_id: int
    class_id: int
    academic_year: int
    status: str
    enrollment_date: date | None

    class Config:
        from_attributes = True
