import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import APP_TITLE, LOCAL_STORAGE_FILE, LOG_LEVEL
from .db.session import close_db_engine, get_session_maker, init_db_engine, init_db_schema
from .local_storage import LocalStorage
from .services.remote_store import RemoteStore
from .services.session_service import SessionTokens
from .storage_config import is_remote_configured
from .store import ClassStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(store: ClassStore | None = None) -> FastAPI:
    app = FastAPI(title=APP_TITLE)
    app.state.store = store
    app.state.sessions = SessionTokens()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        if app.state.store is None:
            remote = RemoteStore(None)
            if is_remote_configured():
                if await init_db_engine():
                    await init_db_schema()
                    remote = RemoteStore(get_session_maker())
                else:
                    logger.warning("Remote store configured but unreachable; replication will fail until restart")
            app.state.store = ClassStore(LocalStorage(LOCAL_STORAGE_FILE), remote)
        await app.state.store.initialize()
        logger.info(
            "Store ready (remote_enabled=%s, users=%d)",
            app.state.store.remote_enabled,
            len(app.state.store.users),
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        await close_db_engine()

    from .api.v1.router import router as api_v1_router

    app.include_router(api_v1_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
