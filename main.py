"""
User Auth Service — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.users import router as users_router
from auth.keys import KeyHolder
from auth.password import policy_from_settings
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.session import build_engine, build_session_factory, init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(settings: Settings = config) -> FastAPI:
    app = FastAPI(
        title="User Auth Service",
        version="1.0.0",
        description="User registration and bearer-token authentication.",
    )

    app.state.settings = settings

    # Signing keys and password policy are fixed for the life of the process
    app.state.key_holder = KeyHolder()
    app.state.key_holder.init(settings.jwt_secret.encode())
    app.state.password_policy = policy_from_settings(settings)
    logger.info(
        "Password policy: %s (cost %d)",
        type(app.state.password_policy).__name__,
        settings.password_cost,
    )

    # Database
    app.state.engine = build_engine(settings.get_database_url())
    app.state.session_factory = build_session_factory(app.state.engine)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/auth")
    app.include_router(users_router, prefix="/users")

    @app.on_event("startup")
    async def on_startup():
        logger.info("Creating database tables…")
        await init_models(app.state.engine)
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.engine.dispose()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
