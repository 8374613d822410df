import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.features.structure.services.content_fetcher import ContentFetcher
from app.platform.config import settings
from app.platform.db.session import init_models
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import LOG_FORMAT

logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    # One preview cache per process, shared by all requests
    app.state.content_fetcher = ContentFetcher(timeout=settings.PREVIEW_REQUEST_TIMEOUT)
    try:
        yield
    finally:
        await app.state.content_fetcher.aclose()


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Accessibility checks and alt text assistance for CMS page editors",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

add_exception_handlers(app)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": f"{settings.APP_NAME} API",
        "description": "Accessibility scans, structure analysis and alt text generation for page editors.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
