from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base


class SubjectORM(Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(64), nullable=False, default="", server_default=text("''"))
    teacher: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))


class AnnouncementORM(Base):
    __tablename__ = "announcements"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    author_id: Mapped[str] = mapped_column(String(64), nullable=False, default="", server_default=text("''"))
    author_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="NORMAL", server_default=text("'NORMAL'"))


class TaskORM(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    subject: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_by: Mapped[str] = mapped_column(String(32), nullable=False, default="", server_default=text("''"))


class ScheduleItemORM(Base):
    __tablename__ = "schedule"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    day: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    time: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
    room: Mapped[str] = mapped_column(String(128), nullable=False, default="", server_default=text("''"))


class VideoMaterialORM(Base):
    __tablename__ = "videos"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
    week: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=text("1"))
    uploaded_by: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))


class DocumentMaterialORM(Base):
    __tablename__ = "materials"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(8), nullable=False, default="PDF", server_default=text("'PDF'"))
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    subject: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
    uploaded_by: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
