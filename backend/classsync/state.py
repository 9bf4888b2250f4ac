"""In-memory application state.

The store replaces the whole ``AppState`` on every change instead of mutating
it, so a reader holding a reference always sees one consistent snapshot.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .schemas import (
    ActivityLog,
    Announcement,
    DocumentMaterial,
    ScheduleItem,
    Subject,
    Task,
    TutorEvent,
    User,
    VideoMaterial,
)


@dataclass(frozen=True)
class AppState:
    current_user: Optional[User] = None
    users: List[User] = field(default_factory=list)
    subjects: List[Subject] = field(default_factory=list)
    announcements: List[Announcement] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    schedule: List[ScheduleItem] = field(default_factory=list)
    videos: List[VideoMaterial] = field(default_factory=list)
    materials: List[DocumentMaterial] = field(default_factory=list)
    tutor_events: List[TutorEvent] = field(default_factory=list)
    activity_log: List[ActivityLog] = field(default_factory=list)
