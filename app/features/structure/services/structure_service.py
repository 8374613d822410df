from bs4 import BeautifulSoup

from app.features.pages.models.page import Page
from app.features.structure.schemas.structure import StructureResponse
from app.features.structure.services.content_fetcher import ContentFetcher
from app.features.structure.services.heading_structure import HeadingStructureService
from app.features.structure.services.landmark_structure import LandmarkStructureService


def analyze_html(html: str):
    soup = BeautifulSoup(html, "html.parser")
    headings, heading_errors = HeadingStructureService.analyze(soup)
    landmarks, landmark_errors = LandmarkStructureService.analyze(soup)
    return headings, landmarks, heading_errors + landmark_errors


async def analyze_page(page: Page, fetcher: ContentFetcher) -> StructureResponse:
    """Fetch the page preview (cached per URL) and analyse its headings and landmarks."""
    html = await fetcher.fetch(page.preview_url)
    headings, landmarks, errors = analyze_html(html)
    return StructureResponse(
        page_id=page.id,
        preview_url=page.preview_url,
        headings=headings,
        landmarks=landmarks,
        errors=errors,
    )
