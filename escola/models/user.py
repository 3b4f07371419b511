from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from escola.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="admin")  # admin, teacher, student, parent
