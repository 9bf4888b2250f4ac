import os
import re

from sqlalchemy.engine import make_url

_SCHEMA_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _normalize_schema(value: str) -> str:
    schema = str(value or "public").strip() or "public"
    if not _SCHEMA_PATTERN.fullmatch(schema):
        raise RuntimeError(
            f"Invalid CLASSSYNC_DB_SCHEMA={value!r}. Expected SQL identifier like 'classsync'."
        )
    return schema


def to_async_driver_url(raw_url: str) -> str:
    url = (raw_url or "").strip()
    if url.startswith("postgresql+asyncpg://"):
        return url
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://") :]
    return url


def build_database_url(remote_url: str, remote_key: str) -> str:
    """Combine the remote endpoint and access key into one driver URL."""
    url = to_async_driver_url(remote_url)
    if not url:
        return ""
    key = (remote_key or "").strip()
    if not key:
        return url
    parsed = make_url(url)
    if parsed.password:
        return url
    return parsed.set(password=key).render_as_string(hide_password=False)


REMOTE_URL: str = (os.getenv("CLASSSYNC_REMOTE_URL") or "").strip()
REMOTE_KEY: str = (os.getenv("CLASSSYNC_REMOTE_KEY") or "").strip()
POSTGRES_SCHEMA: str = _normalize_schema(os.getenv("CLASSSYNC_DB_SCHEMA", "public"))


def is_remote_configured(url: str | None = None, key: str | None = None) -> bool:
    url = REMOTE_URL if url is None else url
    key = REMOTE_KEY if key is None else key
    return bool(str(url or "").strip()) and bool(str(key or "").strip())


DATABASE_URL: str = build_database_url(REMOTE_URL, REMOTE_KEY) if is_remote_configured() else ""
