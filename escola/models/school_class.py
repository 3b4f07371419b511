from sqlalchemy import ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from escola.db.base import Base
from escola.models.teacher import Teacher


class SchoolClass(Base):
    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    year: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    # "manha", "tarde", "noite", "integral"
    shift: Mapped[str] = mapped_column(String(20), nullable=False, default="manha")
    level: Mapped[str | None] = mapped_column(String(40), nullable=True)
    room: Mapped[str | None] = mapped_column(String(60), nullable=True)
    max_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # professor regente
    teacher_id: Mapped[int | None] = mapped_column(
        ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True
    )
    teacher: Mapped[Teacher | None] = relationship()
