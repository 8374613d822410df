from typing import ClassVar

from app.platform.signing import SignedDemand


class CreateScanDemand(SignedDemand):
    """Demand for starting an accessibility scan of a page preview."""

    signed_fields: ClassVar[tuple] = (
        "user_id",
        "page_id",
        "preview_url",
        "language_id",
        "workspace_id",
    )

    user_id: int
    page_id: int
    preview_url: str
    language_id: int
    workspace_id: int
