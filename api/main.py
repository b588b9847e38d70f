import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from bootcamps import router as bootcamps_router
from core.backends import build_store, store_backend
from core.errors import install_error_handlers
from core.notify import Notifier, default_notifier
from core.store import Store
from courses import router as courses_router
from reviews import router as reviews_router
from users import router as users_router

logger = logging.getLogger(__name__)


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(*, store: Store | None = None, notifier: Notifier | None = None) -> FastAPI:
    logging.basicConfig(level=log_level())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A store that cannot open is fatal at boot.
        if app.state.store is None:
            app.state.store = build_store(store_backend())
        await app.state.store.open()
        logger.info("store_opened backend=%s", type(app.state.store).__name__)
        try:
            yield
        finally:
            await app.state.store.close()

    app = FastAPI(lifespan=lifespan)
    app.state.store = store
    app.state.notifier = notifier or default_notifier()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(bootcamps_router.router, tags=["bootcamps"])
    app.include_router(courses_router.router, tags=["courses"])
    app.include_router(reviews_router.router, tags=["reviews"])
    app.include_router(users_router.router, tags=["users"])

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        if await request.app.state.store.ping():
            return JSONResponse({"status": "ok"})
        return JSONResponse({"status": "unavailable"}, status_code=503)

    @app.get("/")
    def root() -> dict:
        return {"message": "bootcamp directory api"}

    return app


app = create_app()
