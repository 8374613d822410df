import asyncio
import json

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from app.features.pages.services.page_service import (
    clear_scan_id,
    get_page,
    get_page_by_scan_id,
    store_scan_id,
)
from app.features.scan.schemas.demand import CreateScanDemand
from app.features.scan.schemas.remote import RemoteOutcome
from app.features.scan.services.scan_poller import ScanStatusPoller
from app.features.scan.services.scanner_api import ScannerApiService, get_scanner_api
from app.platform.auth import CurrentUser, get_current_user
from app.platform.config import settings
from app.platform.db.session import SessionLocal, get_db
from app.platform.dependencies import assert_demand_matches_user, signed_demand
from app.platform.logger import get_logger
from app.platform.response import api_response, error_detail

logger = get_logger(__name__)

router = APIRouter(prefix="/scan", tags=["scan"])


@router.post("/create")
async def create_scan(
    demand: CreateScanDemand = Depends(signed_demand(CreateScanDemand)),
    current_user: CurrentUser = Depends(get_current_user),
    scanner: ScannerApiService = Depends(get_scanner_api),
    db: AsyncSession = Depends(get_db),
):
    """
    Start a remote accessibility scan for the page named in a signed demand.

    The demand's signature is verified before any of its fields is used.
    """
    assert_demand_matches_user(demand, current_user)

    if not scanner.is_configured():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail(
                "Scanner not configured",
                "The accessibility scanner API URL or token is missing.",
            ),
        )

    page = await get_page(db, demand.page_id)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("Page not found", f"Page {demand.page_id} does not exist."),
        )

    result = await scanner.create_scan(demand.preview_url)
    if isinstance(result, RemoteOutcome):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Scan could not be created", "The scanner did not accept the request."),
        )

    await store_scan_id(db, page, result.id)

    logger.info(f"Created scan {result.id} for page {page.id} (user_id={current_user.id})")
    return api_response(
        data={"scanId": result.id, "status": result.status.value},
        message="Scan created",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/get")
async def get_scan(
    scan_id: str = Query("", alias="scanId"),
    current_user: CurrentUser = Depends(get_current_user),
    scanner: ScannerApiService = Depends(get_scanner_api),
):
    """Return the remote scan as-is. 404 tells the client to create a new scan."""
    if not scan_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("No scan id", "No scan id was given."),
        )

    result = await scanner.get_scan(scan_id)
    if result is RemoteOutcome.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("Scan not found", "The scan no longer exists. Start a new scan."),
        )
    if isinstance(result, RemoteOutcome):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Scan could not be loaded", "The scanner could not be reached."),
        )

    return api_response(
        data={**result.model_dump(mode="json", by_alias=True), "totalIssueCount": result.total_issue_count()},
        message="Scan retrieved",
    )


@router.get("/{scan_id}/events")
async def scan_events(
    scan_id: str,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    scanner: ScannerApiService = Depends(get_scanner_api),
    db: AsyncSession = Depends(get_db),
):
    """
    Stream the status of a scan as Server-Sent Events.

    Polls the scanner every ``SCAN_POLL_INTERVAL`` seconds until the scan is
    completed or failed. A scan the scanner no longer knows is recreated for
    the preview of the page that holds its id.
    """
    page = await get_page_by_scan_id(db, scan_id)
    recreate_scan = None

    if page is not None:
        page_id = page.id
        preview_url = page.preview_url

        async def recreate_scan():
            result = await scanner.create_scan(preview_url)
            # request-scoped session is closed once streaming starts
            async with SessionLocal() as session:
                stream_page = await get_page(session, page_id)
                if stream_page is None:
                    return result
                if isinstance(result, RemoteOutcome):
                    await clear_scan_id(session, stream_page)
                else:
                    await store_scan_id(session, stream_page, result.id)
            return result

    poller = ScanStatusPoller(scanner, interval=settings.SCAN_POLL_INTERVAL, create_scan=recreate_scan)

    async def event_generator():
        loop = asyncio.get_event_loop()
        start_time = loop.time()
        try:
            async for update in poller.poll(scan_id):
                if await request.is_disconnected():
                    logger.info(f"[SSE] Client disconnected from scan {scan_id}")
                    break

                yield {"event": "status", "data": json.dumps(update.to_dict())}

                if loop.time() - start_time > settings.SCAN_POLL_TIMEOUT:
                    logger.info(f"[SSE] Poll timeout for scan {scan_id}")
                    yield {"event": "timeout", "data": json.dumps({"message": "Connection timeout"})}
                    break
        finally:
            poller.stop()
            logger.info(f"[SSE] Cleaned up poller for scan {scan_id}")

    return EventSourceResponse(event_generator())
