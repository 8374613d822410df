"""
Polling of remote scan status, mapped to the states the UI renders.
"""
import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, List, Optional, Union

from app.features.scan.schemas.remote import (
    IN_PROGRESS_STATUSES,
    TERMINAL_STATUSES,
    RemoteJob,
    RemoteOutcome,
    ScanStatus,
)
from app.features.scan.services.scanner_api import ScannerApiService
from app.platform.logger import get_logger

logger = get_logger(__name__)

# Called when the remote scan is gone; returns the replacement job or outcome
CreateScanCallback = Callable[[], Awaitable[Union[RemoteJob, RemoteOutcome]]]


class ViewState(str, enum.Enum):
    loading = "loading"
    failed = "failed"
    issues = "issues"
    success = "success"
    idle = "idle"


def is_scan_in_progress(status: Optional[str]) -> bool:
    return status in {s.value for s in IN_PROGRESS_STATUSES}


def get_view_state(status: Optional[str], total_issue_count: int, is_busy: bool) -> ViewState:
    if is_busy:
        return ViewState.loading
    if status == ScanStatus.failed.value:
        return ViewState.failed
    if total_issue_count > 0:
        return ViewState.issues
    if status == ScanStatus.completed.value:
        return ViewState.success
    return ViewState.idle


@dataclass
class PollUpdate:
    scan_id: str
    status: str
    view_state: ViewState
    total_issue_count: int = 0
    violations: List[Dict[str, Any]] = field(default_factory=list)
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanId": self.scan_id,
            "status": self.status,
            "viewState": self.view_state.value,
            "totalIssueCount": self.total_issue_count,
            "violations": self.violations,
            "updatedAt": self.updated_at,
        }


class ScanStatusPoller:
    """
    Re-reads a remote scan on a fixed interval until it reaches a terminal
    status, disappears, fails, or ``stop()`` is called.
    """

    def __init__(
        self,
        scanner: ScannerApiService,
        interval: float = 5.0,
        create_scan: Optional[CreateScanCallback] = None,
    ):
        self.scanner = scanner
        self.interval = interval
        self.create_scan = create_scan
        self._stopped = asyncio.Event()

    def stop(self) -> None:
        self._stopped.set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    async def poll(self, scan_id: str) -> AsyncGenerator[PollUpdate, None]:
        while scan_id and not self.stopped:
            result = await self.scanner.get_scan(scan_id)

            if result is RemoteOutcome.NOT_FOUND:
                scan_id = await self._recreate(scan_id)
                if not scan_id:
                    yield PollUpdate(scan_id="", status="", view_state=ViewState.idle)
                    return
                yield PollUpdate(
                    scan_id=scan_id,
                    status=ScanStatus.pending.value,
                    view_state=ViewState.loading,
                )
                await self._wait()
                continue

            if isinstance(result, RemoteOutcome):
                yield PollUpdate(
                    scan_id=scan_id,
                    status=ScanStatus.failed.value,
                    view_state=ViewState.failed,
                )
                return

            total = result.total_issue_count()
            yield PollUpdate(
                scan_id=result.id,
                status=result.status.value,
                view_state=get_view_state(result.status.value, total, result.is_in_progress),
                total_issue_count=total,
                violations=result.violations,
                updated_at=result.updated_at,
            )

            if result.status in TERMINAL_STATUSES:
                return

            await self._wait()

    async def _recreate(self, scan_id: str) -> str:
        if self.create_scan is None:
            logger.info(f"Scan {scan_id} no longer exists, nothing to poll")
            return ""

        created = await self.create_scan()
        if isinstance(created, RemoteOutcome):
            logger.warning(f"Could not recreate missing scan {scan_id}: {created.value}")
            return ""

        logger.info(f"Recreated missing scan {scan_id} as {created.id}")
        return created.id

    async def _wait(self) -> None:
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass
