from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from escola.db.base import Base
from escola.models.school_class import SchoolClass


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    registration_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)

    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    email: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)

    parent_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    parent_email: Mapped[str | None] = mapped_column(String(120), nullable=True)
    parent_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    class_id: Mapped[int | None] = mapped_column(
        ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # "active", "inactive", "graduated", "transferred"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    school_class: Mapped[SchoolClass | None] = relationship()


class Enrollment(Base):
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    academic_year: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    # "enrolled", "pending", "cancelled", "completed"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="enrolled", index=True)
    enrollment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
