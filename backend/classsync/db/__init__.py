from .session import close_db_engine, get_session_maker, init_db_engine, init_db_schema, is_postgres_ready

__all__ = [
    "close_db_engine",
    "get_session_maker",
    "init_db_engine",
    "init_db_schema",
    "is_postgres_ready",
]
