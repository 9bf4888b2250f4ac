from .records import RecordRepository, row_to_dict
from .users import UserRepository

__all__ = [
    "RecordRepository",
    "UserRepository",
    "row_to_dict",
]
