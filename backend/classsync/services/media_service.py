from __future__ import annotations

import re

DRIVE_HOST = "drive.google.com"
YOUTUBE_EMBED_BASE = "https://www.youtube.com/embed/"

_DRIVE_VIEW_PATTERN = re.compile(r"/view.*|/edit.*")
_YOUTUBE_ID_PATTERN = re.compile(r"^.*(youtu.be/|v/|u/\w/|embed/|watch\?v=|&v=|shorts/|live/)([^#&?]*).*")
_MIN_VIDEO_ID_LENGTH = 10


def to_preview_url(url: str) -> str:
    """Rewrite a Drive view/edit link to its embeddable /preview form."""
    if DRIVE_HOST in url and ("/view" in url or "/edit" in url):
        return _DRIVE_VIEW_PATTERN.sub("/preview", url, count=1)
    return url


def extract_video_id(url: str) -> str | None:
    match = _YOUTUBE_ID_PATTERN.match(url)
    if match and len(match.group(2)) >= _MIN_VIDEO_ID_LENGTH:
        return match.group(2)
    return None


def to_embed_url(url: str) -> str:
    preview = to_preview_url(url)
    if preview != url:
        return preview
    video_id = extract_video_id(url)
    if video_id:
        return f"{YOUTUBE_EMBED_BASE}{video_id}"
    return url
