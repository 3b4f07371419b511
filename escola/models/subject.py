from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from escola.db.base import Base


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    color: Mapped[str | None] = mapped_column(String(30), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # carga semanal em minutos; vazio = 60
    workload_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
