"""Student model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hallpass.core.database import Base
from hallpass.models.base import SurrogateIDMixin, TimestampMixin


class Student(Base, SurrogateIDMixin, TimestampMixin):
    """Roster record plus the student's current in/out state."""

    __tablename__ = "students"

    # Natural key typed in by staff; unique across live students
    student_id: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    grade: Mapped[str] = mapped_column(String(50), nullable=False)
    gender: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    course: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    is_signed_out: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sign_out_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    sign_out_destination: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sign_out_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        Index("ix_students_student_id", "student_id", unique=True),
        Index("ix_students_is_signed_out", "is_signed_out"),
        Index("ix_students_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, student_id={self.student_id}, out={self.is_signed_out})>"
