from .activity_logs import ActivityLogORM
from .content import (
    AnnouncementORM,
    DocumentMaterialORM,
    ScheduleItemORM,
    SubjectORM,
    TaskORM,
    VideoMaterialORM,
)
from .tutor_events import TutorEventORM
from .users import UserORM

__all__ = [
    "ActivityLogORM",
    "AnnouncementORM",
    "DocumentMaterialORM",
    "ScheduleItemORM",
    "SubjectORM",
    "TaskORM",
    "TutorEventORM",
    "UserORM",
]
