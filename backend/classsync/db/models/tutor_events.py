from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base
from .mixins import JSONList, json_list


class TutorEventORM(Base):
    __tablename__ = "tutor_events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    tutor_id: Mapped[str] = mapped_column(String(64), nullable=False, default="", server_default=text("''"))
    tutor_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=5, server_default=text("5"))
    participants: Mapped[list] = mapped_column(JSONList, nullable=False, default=json_list)
    waiting_list: Mapped[list] = mapped_column(JSONList, nullable=False, default=json_list)
