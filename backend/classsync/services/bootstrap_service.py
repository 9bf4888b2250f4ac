"""Seed data used when neither the remote store nor local storage has any."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..config import DEFAULT_PASSWORD, SEAT_COUNT
from ..schemas import (
    Announcement,
    DocumentMaterial,
    Role,
    ScheduleItem,
    Subject,
    Task,
    TutorEvent,
    User,
    VideoMaterial,
)
from .auth_service import hash_password

_STAFF_ACCOUNTS = (
    ("admin", "admin", "Super Administrator", Role.ADMIN),
    ("kuri", "kurikulum", "Staff Kurikulum", Role.KURIKULUM),
    ("komti", "komti", "Ketua Tingkat", Role.KOMTI),
    ("wakomti", "wakomti", "Wakil Ketua", Role.WAKOMTI),
    ("it", "it", "IT Support", Role.IT_LOGISTIK),
    ("tatib", "tatib", "Tata Tertib", Role.TATA_TERTIB),
    ("sekre", "sekretaris", "Sekretaris Kelas", Role.SEKRETARIS),
    ("bibilung1", "bibilung", "Master Bibilung", Role.MURID_BIBILUNG),
)


def generate_users(password_hash: str | None = None) -> list[User]:
    # One hash for the whole roster; bcrypt is slow on purpose.
    password_hash = password_hash or hash_password(DEFAULT_PASSWORD)
    users = [
        User(id=user_id, username=username, full_name=full_name, role=role, is_active=True, password=password_hash)
        for user_id, username, full_name, role in _STAFF_ACCOUNTS
    ]
    for i in range(1, SEAT_COUNT + 1):
        users.append(
            User(
                id=f"s{i}",
                username=f"student{i}",
                full_name=f"Student Name {i}",
                role=Role.STUDENT,
                is_active=True,
                password=password_hash,
                seat_index=i - 1,
            )
        )
    return users


def initial_subjects() -> list[Subject]:
    return [
        Subject(id="1", name="Web Development", code="WEB101", teacher="Mr. Smith"),
        Subject(id="2", name="Database Systems", code="DB201", teacher="Mrs. Jones"),
        Subject(id="3", name="Calculus", code="MAT301", teacher="Dr. Brown"),
        Subject(id="4", name="English", code="ENG101", teacher="Ms. Wilson"),
    ]


def initial_announcements(now: datetime | None = None) -> list[Announcement]:
    now = now or datetime.now(timezone.utc)
    return [
        Announcement(
            id="1",
            title="Welcome to the New Semester!",
            content="Please check your schedule and seating arrangement.",
            date=now,
            author_id="komti",
            author_name="Ketua Tingkat",
            type="IMPORTANT",
        )
    ]


def initial_tasks(now: datetime | None = None) -> list[Task]:
    now = now or datetime.now(timezone.utc)
    return [
        Task(
            id="1",
            title="Calculus Homework Chapter 1",
            description="Solve problems 1-10 on page 24.",
            subject="Calculus",
            deadline=now + timedelta(days=2),
            is_completed=False,
            created_by=Role.KURIKULUM,
        )
    ]


def initial_schedule() -> list[ScheduleItem]:
    return [
        ScheduleItem(id="1", day="Monday", time="08:00 - 10:00", subject="Web Development", room="Lab 1"),
        ScheduleItem(id="2", day="Monday", time="10:00 - 12:00", subject="Database Systems", room="Lab 2"),
        ScheduleItem(id="3", day="Tuesday", time="08:00 - 10:00", subject="English", room="Class A"),
    ]


def initial_videos() -> list[VideoMaterial]:
    return [
        VideoMaterial(
            id="1",
            title="Intro to React",
            url="https://www.youtube.com/embed/SqcY0GlETPk",
            subject="Web Development",
            week=1,
            uploaded_by="Kurikulum",
        )
    ]


def initial_materials() -> list[DocumentMaterial]:
    return [
        DocumentMaterial(
            id="1",
            title="Database Normalization Guide",
            type="PDF",
            url="https://www.w3.org/WAI/ER/tests/xhtml/testfiles/resources/pdf/dummy.pdf",
            description="Comprehensive guide to 1NF, 2NF, 3NF",
            subject="Database Systems",
            uploaded_by="Sekretaris",
        )
    ]


def initial_tutor_events(now: datetime | None = None) -> list[TutorEvent]:
    now = now or datetime.now(timezone.utc)
    return [
        TutorEvent(
            id="1",
            title="React Hooks Deep Dive",
            description="Extra class to understand useEffect and useState deeply.",
            date=now + timedelta(days=3),
            tutor_id="bibilung1",
            tutor_name="Master Bibilung",
            max_participants=5,
            participants=["s1", "s2"],
            waiting_list=[],
        )
    ]
