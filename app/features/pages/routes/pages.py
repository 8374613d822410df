from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.alt_text.schemas.demand import GenerateAltTextDemand
from app.features.alt_text.services.openai_service import OpenAIService, get_openai_service
from app.features.pages.schemas.page import (
    FileReferenceResponse,
    FileReferenceUpdate,
    MissingAltTextItem,
    MissingAltTextResponse,
    PageResponse,
)
from app.features.pages.services.page_service import (
    ALT_TEXT_COLUMNS,
    FILE_REFERENCE_TABLE,
    build_edit_link,
    get_content_element,
    get_file_reference,
    get_page,
    list_missing_alt_text,
    update_alternative,
    update_content_element,
)
from app.features.scan.schemas.demand import CreateScanDemand
from app.features.structure.schemas.structure import ContentElementResponse, ContentElementUpdate
from app.platform.auth import CurrentUser, get_current_user
from app.platform.db.session import get_db
from app.platform.logger import get_logger
from app.platform.response import api_response, error_detail

logger = get_logger(__name__)

router = APIRouter(tags=["pages"])


async def _page_or_404(db: AsyncSession, page_id: int):
    page = await get_page(db, page_id)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("Page not found", f"Page {page_id} does not exist."),
        )
    return page


def _require_language(user: CurrentUser, language_id: int) -> None:
    if not user.check_language_access(language_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail("Invalid language", "You do not have access to this language."),
        )


@router.get("/pages/{page_id}")
async def get_page_detail(
    page_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    page = await _page_or_404(db, page_id)
    return api_response(
        data=PageResponse.model_validate(page).model_dump(),
        message="Page retrieved",
    )


@router.get("/pages/{page_id}/scan-demand")
async def get_scan_demand(
    page_id: int,
    language_id: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Issue a signed demand the editor can post back to ``/scan/create``.

    The page's stored scan id is returned alongside so the client can resume
    polling an earlier scan instead of starting a new one.
    """
    _require_language(current_user, language_id)
    page = await _page_or_404(db, page_id)

    demand = CreateScanDemand(
        user_id=current_user.id,
        page_id=page.id,
        preview_url=page.preview_url,
        language_id=language_id,
        workspace_id=current_user.workspace_id,
    )
    return api_response(
        data={"demand": demand.to_payload(), "scanId": page.scan_id},
        message="Scan demand issued",
    )


@router.get("/pages/{page_id}/missing-alt-text")
async def get_missing_alt_text(
    page_id: int,
    language_id: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
    openai_service: OpenAIService = Depends(get_openai_service),
    db: AsyncSession = Depends(get_db),
):
    """List images on a page without alternative text, each with a signed generate demand."""
    _require_language(current_user, language_id)
    await _page_or_404(db, page_id)

    generation_enabled = openai_service.is_enabled_and_configured()

    references = await list_missing_alt_text(db, page_id, language_id)
    items = []
    for reference in references:
        generate_demand = None
        if generation_enabled and openai_service.is_file_ext_supported(reference.file.extension):
            generate_demand = GenerateAltTextDemand(
                user_id=current_user.id,
                page_id=page_id,
                language_id=language_id,
                workspace_id=current_user.workspace_id,
                record_table=FILE_REFERENCE_TABLE,
                record_id=reference.id,
                file_id=reference.file_id,
                record_columns=ALT_TEXT_COLUMNS,
            ).to_payload()

        items.append(
            MissingAltTextItem(
                file_reference_id=reference.id,
                file_id=reference.file_id,
                file_name=reference.file.name,
                edit_link=build_edit_link(
                    FILE_REFERENCE_TABLE, reference.id, ALT_TEXT_COLUMNS[0], reference.file.name
                ),
                generate_demand=generate_demand,
            )
        )

    response = MissingAltTextResponse(
        page_id=page_id,
        language_id=language_id,
        items=items,
        count=len(items),
    )
    return api_response(data=response.model_dump(), message="Missing alternative texts retrieved")


@router.patch("/file-references/{reference_id}")
async def patch_file_reference(
    reference_id: int,
    body: FileReferenceUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    reference = await get_file_reference(db, reference_id)
    if reference is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("File reference not found", f"File reference {reference_id} does not exist."),
        )
    _require_language(current_user, reference.language_id)

    reference = await update_alternative(db, reference, body.alternative)
    logger.info(f"Alternative text updated for file reference {reference_id} (user_id={current_user.id})")
    return api_response(
        data=FileReferenceResponse.model_validate(reference).model_dump(),
        message="Alternative text saved",
    )


@router.patch("/content-elements/{element_id}")
async def patch_content_element(
    element_id: int,
    body: ContentElementUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change the heading level or landmark role of a content element shown in the structure views."""
    element = await get_content_element(db, element_id)
    if element is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("Content element not found", f"Content element {element_id} does not exist."),
        )
    _require_language(current_user, element.language_id)

    element = await update_content_element(
        db, element, heading_level=body.heading_level, landmark_role=body.landmark_role
    )
    logger.info(f"Content element {element_id} updated (user_id={current_user.id})")
    return api_response(
        data=ContentElementResponse.model_validate(element).model_dump(),
        message="Content element saved",
    )
