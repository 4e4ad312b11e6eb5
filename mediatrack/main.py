import asyncio
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from mediatrack.config import API_PREFIX, CORS_ORIGINS, LOG_LEVEL, PORT
from mediatrack.database import build_engine, build_session_factory, init_models
from mediatrack.errors import register_exception_handlers
from mediatrack.limiter import limiter
from mediatrack.logging_config import configure_logging
from mediatrack.routes import auth, comment_routes, library_routes, media_routes, user_routes


def create_app(engine: Optional[AsyncEngine] = None, init_db: bool = True) -> FastAPI:
    """Build the API around one engine; tests pass their own in-memory one."""
    engine = engine or build_engine()

    app = FastAPI(title="Movies & Series Tracker API")
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(user_routes.router, prefix=API_PREFIX)
    app.include_router(media_routes.router, prefix=API_PREFIX)
    app.include_router(library_routes.router, prefix=API_PREFIX)
    app.include_router(comment_routes.router, prefix=API_PREFIX)

    @app.get("/")
    async def root():
        return {"message": "Movies & Series API"}

    if init_db:
        @app.on_event("startup")
        async def on_startup():
            # schema create plus admin sentinel seed; one retry on failure
            for attempt in range(2):
                try:
                    await init_models(engine)
                    logger.info("Database schema ready")
                    break
                except Exception as e:
                    if attempt == 0:
                        logger.warning("Schema init failed, retrying: {!r}", e)
                        await asyncio.sleep(0.5)
                    else:
                        logger.error("Schema init failed twice, serving with existing tables: {!r}", e)

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


configure_logging(LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mediatrack.main:app", host="0.0.0.0", port=PORT)
