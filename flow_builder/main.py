from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flow_builder.shared.core.config import settings
from flow_builder.shared.core.logging import setup_logging
from flow_builder.shared.middleware.correlation import CorrelationIdMiddleware
from flow_builder.shared.utils.http_client import (
    http_client_manager,
    startup_http_client,
    shutdown_http_client,
)
from flow_builder.modules.flows.api import router as flows_router

setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup_http_client()
    yield
    await shutdown_http_client()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)

# Klaviyo flows router
app.include_router(flows_router, prefix=settings.API_PREFIX)

@app.get("/")
def root():
    return {"message": "Klaviyo Flow Builder API is running"}

@app.get("/health")
def health():
    return {
        "status": "ok",
        "klaviyo_configured": bool(settings.KLAVIYO_API_KEY),
        "klaviyo_revision": settings.KLAVIYO_REVISION,
        "http_client": http_client_manager.get_status(),
    }
