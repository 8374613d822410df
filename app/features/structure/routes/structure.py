from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.pages.services.page_service import get_page
from app.features.structure.services.content_fetcher import ContentFetcher
from app.features.structure.services.structure_service import analyze_page
from app.platform.auth import CurrentUser, get_current_user
from app.platform.db.session import get_db
from app.platform.dependencies import get_content_fetcher
from app.platform.response import api_response, error_detail

router = APIRouter(prefix="/pages/{page_id}/structure", tags=["structure"])


async def _page_with_preview(db: AsyncSession, page_id: int):
    page = await get_page(db, page_id)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("Page not found", f"Page {page_id} does not exist."),
        )
    if not page.preview_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("No preview", "This page has no preview URL."),
        )
    return page


@router.get("")
async def get_structure(
    page_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    db: AsyncSession = Depends(get_db),
):
    """Heading and landmark structure of the page preview, with the problems found."""
    page = await _page_with_preview(db, page_id)
    structure = await analyze_page(page, fetcher)
    return api_response(data=structure.model_dump(), message="Structure analysed")


@router.delete("/cache")
async def invalidate_structure_cache(
    page_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    db: AsyncSession = Depends(get_db),
):
    page = await _page_with_preview(db, page_id)
    fetcher.invalidate(page.preview_url)
    return api_response(data={"previewUrl": page.preview_url}, message="Preview cache cleared")
