from datetime import date

from sqlalchemy import Date, Float, ForeignKey, Integer, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from escola.db.base import Base


class GradingPeriod(Base):
    __tablename__ = "grading_periods"
    __table_args__ = (UniqueConstraint("academic_year", "period_type", "period_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    academic_year: Mapped[int] = mapped_column(SmallInteger, nullable=False, index=True)
    period_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    # "bimonthly", "semestral"
    period_type: Mapped[str] = mapped_column(String(20), nullable=False, default="bimonthly")
    name: Mapped[str] = mapped_column(String(60), nullable=False)  # "1º Bimestre"

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)


class Grade(Base):
    __tablename__ = "grades"
    __table_args__ = (UniqueConstraint("student_id", "subject_id", "grading_period_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    grading_period_id: Mapped[int] = mapped_column(
        ForeignKey("grading_periods.id", ondelete="CASCADE"), nullable=False, index=True
    )
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
