from sqlalchemy import ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from escola.db.base import Base
from escola.models.subject import Subject
from escola.models.teacher import Teacher


class ScheduleEntry(Base):
    """Uma aula da grade semanal de uma turma."""

    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[int | None] = mapped_column(
        ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # 0=Seg ... 6=Dom
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # "07:00"
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)

    room: Mapped[str | None] = mapped_column(String(60), nullable=True)

    subject: Mapped[Subject] = relationship()
    teacher: Mapped[Teacher | None] = relationship()
