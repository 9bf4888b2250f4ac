from typing import Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB


def json_list() -> list[Any]:
    return []


# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests).
JSONList = JSON().with_variant(JSONB(), "postgresql")
