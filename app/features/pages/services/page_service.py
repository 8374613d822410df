import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.pages.models.page import ContentElement, FileReference, MediaFile, Page
from app.features.pages.schemas.page import RecordEditLink

logger = logging.getLogger(__name__)

FILE_REFERENCE_TABLE = "file_references"
CONTENT_ELEMENT_TABLE = "content_elements"
ALT_TEXT_COLUMNS = ("alternative",)


async def get_page(db: AsyncSession, page_id: int) -> Optional[Page]:
    result = await db.execute(select(Page).where(Page.id == page_id))
    return result.scalar_one_or_none()


async def store_scan_id(db: AsyncSession, page: Page, scan_id: str) -> None:
    page.scan_id = scan_id
    page.scan_updated_at = datetime.utcnow()
    await db.commit()
    logger.info(f"Stored scan {scan_id} on page {page.id}")


async def get_file_reference(db: AsyncSession, reference_id: int) -> Optional[FileReference]:
    result = await db.execute(select(FileReference).where(FileReference.id == reference_id))
    return result.scalar_one_or_none()


async def list_missing_alt_text(
    db: AsyncSession, page_id: int, language_id: int
) -> List[FileReference]:
    """File references on a page whose alternative text is empty."""
    query = (
        select(FileReference)
        .where(
            FileReference.page_id == page_id,
            FileReference.language_id == language_id,
            or_(FileReference.alternative.is_(None), FileReference.alternative == ""),
        )
        .order_by(FileReference.id)
    )
    result = await db.execute(query)
    return list(result.scalars().unique().all())


async def update_alternative(db: AsyncSession, reference: FileReference, alternative: str) -> FileReference:
    reference.alternative = alternative.strip()
    await db.commit()
    await db.refresh(reference)
    return reference


def build_edit_link(table: str, record_id: int, column: str, label: str) -> RecordEditLink:
    return RecordEditLink(
        uri=f"/api/v1/{table.replace('_', '-')}/{record_id}",
        label=f"{label} ({table}:{record_id}, {column})",
    )


async def get_page_by_scan_id(db: AsyncSession, scan_id: str) -> Optional[Page]:
    result = await db.execute(select(Page).where(Page.scan_id == scan_id))
    return result.scalars().first()


async def clear_expired_scans(db: AsyncSession, cutoff: datetime) -> int:
    """Forget scan ids stored before ``cutoff``. Returns the number of pages touched."""
    result = await db.execute(
        select(Page).where(Page.scan_id.is_not(None), Page.scan_updated_at < cutoff)
    )
    pages = list(result.scalars().all())
    for page in pages:
        page.scan_id = None
        page.scan_updated_at = None
    await db.commit()
    return len(pages)


async def clear_scan_id(db: AsyncSession, page: Page) -> None:
    page.scan_id = None
    page.scan_updated_at = None
    await db.commit()


async def get_media_file(db: AsyncSession, file_id: int) -> Optional[MediaFile]:
    result = await db.execute(select(MediaFile).where(MediaFile.id == file_id))
    return result.scalar_one_or_none()


async def get_content_element(db: AsyncSession, element_id: int) -> Optional[ContentElement]:
    result = await db.execute(select(ContentElement).where(ContentElement.id == element_id))
    return result.scalar_one_or_none()


async def update_content_element(
    db: AsyncSession,
    element: ContentElement,
    heading_level: Optional[int] = None,
    landmark_role: Optional[str] = None,
) -> ContentElement:
    if heading_level is not None:
        element.heading_level = heading_level
    if landmark_role is not None:
        element.landmark_role = landmark_role
    await db.commit()
    await db.refresh(element)
    return element
