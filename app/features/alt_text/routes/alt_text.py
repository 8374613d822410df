import asyncio

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.alt_text.schemas.demand import GenerateAltTextDemand
from app.features.alt_text.services.alt_text_generator import AltTextGeneratorService
from app.features.alt_text.services.openai_service import OpenAIService, get_openai_service
from app.features.pages.services.page_service import (
    ALT_TEXT_COLUMNS,
    FILE_REFERENCE_TABLE,
    get_file_reference,
    get_media_file,
)
from app.platform.auth import CurrentUser, get_current_user
from app.platform.config import settings
from app.platform.db.session import get_db
from app.platform.dependencies import assert_demand_matches_user, signed_demand
from app.platform.exceptions import RemoteServiceError
from app.platform.logger import get_logger
from app.platform.response import api_response, error_detail

logger = get_logger(__name__)

router = APIRouter(prefix="/alt-text", tags=["alt-text"])


def _forbidden(title: str, description: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_detail(title, description))


@router.post("/generate")
async def generate_alt_text(
    demand: GenerateAltTextDemand = Depends(signed_demand(GenerateAltTextDemand)),
    current_user: CurrentUser = Depends(get_current_user),
    openai_service: OpenAIService = Depends(get_openai_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Generate alternative text for the image behind a file reference.

    The text is returned to the editor, not stored. Saving goes through
    ``PATCH /file-references/{id}`` once the editor accepts it.
    """
    assert_demand_matches_user(demand, current_user)

    if not openai_service.is_enabled_and_configured():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail(
                "Alt text generation unavailable",
                "Alt text generation is disabled or no OpenAI API key is configured.",
            ),
        )

    if demand.record_table != FILE_REFERENCE_TABLE or not set(demand.record_columns) <= set(ALT_TEXT_COLUMNS):
        raise _forbidden("Invalid record", "Alternative text cannot be generated for this record.")

    reference = await get_file_reference(db, demand.record_id)
    if reference is None or reference.page_id != demand.page_id or reference.file_id != demand.file_id:
        raise _forbidden("Invalid record", "The file reference does not belong to this page.")

    file = await get_media_file(db, demand.file_id)
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("File not found", f"File {demand.file_id} does not exist."),
        )

    if not openai_service.is_file_ext_supported(file.extension):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("Unsupported file type", f"Files of type '{file.extension}' are not supported."),
        )

    language_code = settings.SITE_LANGUAGES.get(demand.language_id, "en")
    generator = AltTextGeneratorService(openai_service)
    # OpenAI client is blocking
    alt_text = await asyncio.to_thread(generator.generate, file, language_code)
    if not alt_text:
        raise RemoteServiceError(
            f"No alternative text was generated for file {file.id}",
            title="Alt text generation failed",
        )

    logger.info(f"Generated alt text for file reference {reference.id} (user_id={current_user.id})")
    return api_response(
        data={"altText": alt_text},
        message="Alternative text generated",
        status_code=status.HTTP_201_CREATED,
    )
