from typing import Optional, Union
from urllib.parse import quote

import httpx

from app.features.scan.schemas.remote import RemoteJob, RemoteOutcome, ScanStatus
from app.platform.config import Settings, settings as default_settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

ScanResult = Union[RemoteJob, RemoteOutcome]


class ScannerApiService:
    """
    Client for the external accessibility scanner.

    Every call is a single attempt with a fixed timeout. Failures are logged
    here and reported to the caller as ``RemoteOutcome.FAILURE``; retrying is
    up to the caller.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self._transport = transport

    @property
    def api_url(self) -> str:
        return (self.settings.SCANNER_API_URL or "").rstrip("/")

    @property
    def api_token(self) -> str:
        return self.settings.SCANNER_API_TOKEN or ""

    def is_configured(self) -> bool:
        return bool(self.api_url) and bool(self.api_token)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.SCANNER_REQUEST_TIMEOUT,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.api_token}",
                "Accept": "application/json",
            },
        )

    async def create_scan(self, url: str) -> ScanResult:
        """Start a remote scan of ``url``. Expects 201 with the job body."""
        if not self.is_configured():
            logger.warning("Accessibility scanner API is not configured")
            return RemoteOutcome.UNCONFIGURED

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.api_url}/scans",
                    json={
                        "url": url,
                        "language": self.settings.SCANNER_LANGUAGE,
                        "scannerType": self.settings.SCANNER_TYPE,
                    },
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Exception while creating scan for {url}: {e}")
            return RemoteOutcome.FAILURE

        if response.status_code != 201:
            logger.error(
                f"Failed to create scan for {url}: status={response.status_code} body={response.text[:500]}"
            )
            return RemoteOutcome.FAILURE

        return self._parse_job(response, context=f"create scan for {url}", default_status=ScanStatus.pending)

    async def get_scan(self, scan_id: str) -> ScanResult:
        """Look up a remote scan. A 404 means the caller should start a new one."""
        if not self.is_configured():
            logger.warning("Accessibility scanner API is not configured")
            return RemoteOutcome.UNCONFIGURED

        try:
            async with self._client() as client:
                response = await client.get(f"{self.api_url}/scans/{quote(scan_id, safe='')}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Exception while getting scan {scan_id}: {e}")
            return RemoteOutcome.FAILURE

        if response.status_code == 404:
            logger.info(f"Scan {scan_id} not found, a new scan should be created")
            return RemoteOutcome.NOT_FOUND

        if response.status_code != 200:
            logger.error(
                f"Failed to get scan {scan_id}: status={response.status_code} body={response.text[:500]}"
            )
            return RemoteOutcome.FAILURE

        return self._parse_job(response, context=f"get scan {scan_id}", default_status=ScanStatus.completed)

    @staticmethod
    def _parse_job(response: httpx.Response, context: str, default_status: ScanStatus) -> ScanResult:
        try:
            data = response.json()
            if isinstance(data, dict) and not data.get("status"):
                data["status"] = default_status.value
            return RemoteJob.model_validate(data)
        except ValueError as e:  # JSONDecodeError, UnicodeDecodeError, ValidationError
            logger.error(f"Invalid JSON response from scanner API ({context}): {e}")
            return RemoteOutcome.FAILURE


def get_scanner_api() -> ScannerApiService:
    return ScannerApiService()
