from fastapi import APIRouter

from app.features.alt_text.routes.alt_text import router as alt_text_router
from app.features.pages.routes.pages import router as pages_router
from app.features.scan.routes.scan import router as scan_router
from app.features.structure.routes.structure import router as structure_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(pages_router)
api_router.include_router(scan_router)
api_router.include_router(alt_text_router)
api_router.include_router(structure_router)
