import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from mangum import Mangum
from starlette.middleware.cors import CORSMiddleware

from loyaltyapi import containers
from loyaltyapi.config import settings
from loyaltyapi.core.exception_handlers import register_exception_handlers
from loyaltyapi.core.logging_middleware import LoggingMiddleware
from loyaltyapi.database.connection import engine
from loyaltyapi.logging_config import setup_logging
from loyaltyapi.models.base import Base
from loyaltyapi.routers import (
    achievements_router,
    admin_router,
    bingo_router,
    catalog_router,
    codes_router,
    events_router,
    health_router,
    ledger_router,
    scanner_router,
    telegram_router,
    transactions_router,
)

load_dotenv("loyaltyapi/.env")
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.is_sqlite:
        # 로컬 SQLite 는 마이그레이션 없이 테이블을 만든다
        Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.container = containers.Container()  # type: ignore

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router.router)
    for module in (
        events_router,
        catalog_router,
        bingo_router,
        codes_router,
        scanner_router,
        achievements_router,
        ledger_router,
        transactions_router,
        telegram_router,
        admin_router,
    ):
        app.include_router(module.router, prefix=settings.API_PREFIX)

    return app


app = create_app()

handler = Mangum(app)
