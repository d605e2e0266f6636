from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import api_router
from app.api.v1 import v1_router
from app.core.config import settings
from app.core.logging_config import setup_logging
from app.infrastructure.cache.redis_client import close_redis_client

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_redis_client()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(api_router)
app.include_router(v1_router)
