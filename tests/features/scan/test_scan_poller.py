"""
Tests for scan status polling and view-state mapping.
"""

import asyncio

import pytest

from app.features.scan.schemas.remote import RemoteJob, RemoteOutcome
from app.features.scan.services.scan_poller import (
    PollUpdate,
    ScanStatusPoller,
    ViewState,
    get_view_state,
    is_scan_in_progress,
)


class FakeScanner:
    """Returns queued results from get_scan and records the ids asked for."""

    def __init__(self, *results):
        self.results = list(results)
        self.requested = []

    async def get_scan(self, scan_id):
        self.requested.append(scan_id)
        return self.results.pop(0)


def job(scan_id="scan-1", status="pending", issues=0):
    violations = [{"id": "image-alt", "issues": [{}] * issues}] if issues else []
    return RemoteJob(id=scan_id, status=status, violations=violations)


async def collect(poller, scan_id):
    return [update async for update in poller.poll(scan_id)]


class TestViewState:
    @pytest.mark.parametrize(
        "status, issues, busy, expected",
        [
            ("completed", 3, True, ViewState.loading),
            ("failed", 0, False, ViewState.failed),
            ("failed", 2, False, ViewState.failed),
            ("completed", 2, False, ViewState.issues),
            ("running", 1, False, ViewState.issues),
            ("completed", 0, False, ViewState.success),
            ("pending", 0, False, ViewState.idle),
            (None, 0, False, ViewState.idle),
        ],
    )
    def test_rules_apply_in_order(self, status, issues, busy, expected):
        assert get_view_state(status, issues, busy) is expected

    def test_in_progress_statuses(self):
        assert is_scan_in_progress("pending")
        assert is_scan_in_progress("running")
        assert not is_scan_in_progress("completed")
        assert not is_scan_in_progress("failed")
        assert not is_scan_in_progress(None)


class TestScanStatusPoller:
    @pytest.mark.asyncio
    async def test_polls_until_completed(self):
        scanner = FakeScanner(job(status="pending"), job(status="running"), job(status="completed", issues=2))
        updates = await collect(ScanStatusPoller(scanner, interval=0), "scan-1")

        assert [u.status for u in updates] == ["pending", "running", "completed"]
        assert [u.view_state for u in updates] == [ViewState.loading, ViewState.loading, ViewState.issues]
        assert updates[-1].total_issue_count == 2
        assert scanner.requested == ["scan-1"] * 3

    @pytest.mark.asyncio
    async def test_stops_at_failed(self):
        scanner = FakeScanner(job(status="failed"))
        updates = await collect(ScanStatusPoller(scanner, interval=0), "scan-1")
        assert len(updates) == 1
        assert updates[0].view_state is ViewState.failed

    @pytest.mark.asyncio
    async def test_remote_failure_yields_failed(self):
        scanner = FakeScanner(RemoteOutcome.FAILURE)
        updates = await collect(ScanStatusPoller(scanner, interval=0), "scan-1")
        assert [(u.status, u.view_state) for u in updates] == [("failed", ViewState.failed)]

    @pytest.mark.asyncio
    async def test_not_found_without_recreate_goes_idle(self):
        scanner = FakeScanner(RemoteOutcome.NOT_FOUND)
        updates = await collect(ScanStatusPoller(scanner, interval=0), "gone")
        assert len(updates) == 1
        assert updates[0].scan_id == ""
        assert updates[0].view_state is ViewState.idle

    @pytest.mark.asyncio
    async def test_not_found_recreates_and_polls_new_id(self):
        scanner = FakeScanner(RemoteOutcome.NOT_FOUND, job(scan_id="scan-2", status="completed"))

        async def create_scan():
            return job(scan_id="scan-2")

        poller = ScanStatusPoller(scanner, interval=0, create_scan=create_scan)
        updates = await collect(poller, "gone")

        assert scanner.requested == ["gone", "scan-2"]
        assert [(u.scan_id, u.view_state) for u in updates] == [
            ("scan-2", ViewState.loading),
            ("scan-2", ViewState.success),
        ]

    @pytest.mark.asyncio
    async def test_failed_recreate_goes_idle(self):
        scanner = FakeScanner(RemoteOutcome.NOT_FOUND)

        async def create_scan():
            return RemoteOutcome.FAILURE

        updates = await collect(ScanStatusPoller(scanner, interval=0, create_scan=create_scan), "gone")
        assert [u.view_state for u in updates] == [ViewState.idle]

    @pytest.mark.asyncio
    async def test_empty_scan_id_yields_nothing(self):
        scanner = FakeScanner()
        assert await collect(ScanStatusPoller(scanner, interval=0), "") == []
        assert scanner.requested == []

    @pytest.mark.asyncio
    async def test_stop_ends_waiting_poll(self):
        scanner = FakeScanner(*[job(status="running") for _ in range(5)])
        poller = ScanStatusPoller(scanner, interval=30)
        updates = []

        async def consume():
            async for update in poller.poll("scan-1"):
                updates.append(update)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.05)
        poller.stop()
        await asyncio.wait_for(task, timeout=1)

        assert poller.stopped is True
        assert len(updates) == 1

    def test_update_serializes_camel_case(self):
        update = PollUpdate(scan_id="s", status="completed", view_state=ViewState.success)
        assert update.to_dict() == {
            "scanId": "s",
            "status": "completed",
            "viewState": "success",
            "totalIssueCount": 0,
            "violations": [],
            "updatedAt": None,
        }
