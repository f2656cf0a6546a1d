from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from bullpen.config.settings import settings
from bullpen.core.logger import setup_logger
from bullpen.db.session import init_db
from bullpen.sessions.routes import router as bullpen_sessions_router

setup_logger(level=settings.log_level, log_file=settings.log_file, serialize_file=settings.log_serialize)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Ensure database tables exist before serving requests."""
    logger.info("Ensuring database tables exist")
    init_db()
    yield
    logger.info("Bullpen session engine shutting down")


app = FastAPI(title="Bullpen Session Engine", lifespan=lifespan)

app.include_router(bullpen_sessions_router, prefix="/api/v1")

logger.info("FastAPI application initialized")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
