from fastapi import APIRouter, Depends

from app.features.alt_text.services.openai_service import OpenAIService, get_openai_service
from app.features.scan.services.scanner_api import ScannerApiService, get_scanner_api
from app.platform.config import settings
from app.platform.response import api_response

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    scanner: ScannerApiService = Depends(get_scanner_api),
    openai_service: OpenAIService = Depends(get_openai_service),
):
    """Liveness plus which optional integrations this instance can use."""
    return api_response(
        data={
            "status": "ok",
            "service": settings.APP_NAME,
            "scanner_configured": scanner.is_configured(),
            "alt_text_enabled": openai_service.is_enabled_and_configured(),
        },
        message="Service is healthy",
    )
