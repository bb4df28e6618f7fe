from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI

from hookbridge.config import settings
from hookbridge.logger import setup_logging
from hookbridge.middleware import LoggingMiddleware
from hookbridge.routes import builds_router, webhooks_router

if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=0.1,
        profiles_sample_rate=0.1,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    yield


app = FastAPI(lifespan=lifespan)
app.add_middleware(LoggingMiddleware)


@app.get("/", tags=["health"])
async def read_root():
    return {"status": "ok"}


app.include_router(webhooks_router)
app.include_router(builds_router)
