from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    ADMIN = "ADMIN"
    STUDENT = "STUDENT"
    KURIKULUM = "KURIKULUM"
    KOMTI = "KOMTI"
    WAKOMTI = "WAKOMTI"
    IT_LOGISTIK = "IT_LOGISTIK"
    TATA_TERTIB = "TATA_TERTIB"
    SEKRETARIS = "SEKRETARIS"
    MURID_BIBILUNG = "MURID_BIBILUNG"


AnnouncementType = Literal["NORMAL", "IMPORTANT", "EMERGENCY"]
DocumentType = Literal["PDF", "DOC"]


class User(BaseModel):
    id: str
    username: str
    full_name: str = ""
    role: Role = Role.STUDENT
    is_active: bool = True
    # bcrypt hash, or plaintext for accounts created before hashing was introduced
    password: Optional[str] = None
    seat_index: Optional[int] = None

    def public(self) -> dict:
        return self.model_dump(mode="json", exclude={"password"})


class Subject(BaseModel):
    id: str
    name: str
    code: str = ""
    teacher: str = ""


class Announcement(BaseModel):
    id: str
    title: str
    content: str = ""
    date: datetime
    author_id: str = ""
    author_name: str = ""
    type: AnnouncementType = "NORMAL"


class Task(BaseModel):
    id: str
    title: str
    description: str = ""
    subject: str = ""
    deadline: datetime
    is_completed: bool = False
    created_by: Role = Role.KURIKULUM


class ScheduleItem(BaseModel):
    id: str
    day: str
    time: str
    subject: str = ""
    room: str = ""


class VideoMaterial(BaseModel):
    id: str
    title: str
    url: str
    subject: str = ""
    week: int = 1
    uploaded_by: str = ""


class DocumentMaterial(BaseModel):
    id: str
    title: str
    type: DocumentType = "PDF"
    url: str
    description: str = ""
    subject: str = ""
    uploaded_by: str = ""


class TutorEvent(BaseModel):
    id: str
    title: str
    description: str = ""
    date: datetime
    tutor_id: str = ""
    tutor_name: str = ""
    max_participants: int = Field(default=5, ge=0)
    participants: List[str] = Field(default_factory=list)
    waiting_list: List[str] = Field(default_factory=list)


class ActivityLog(BaseModel):
    id: str
    user_id: str
    action: str
    timestamp: datetime
