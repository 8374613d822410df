from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecordEditLink(BaseModel):
    """Where a displayed item comes from: an edit URI plus a human-readable label."""
    uri: str
    label: str


class PageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    preview_url: str
    workspace_id: int
    scan_id: Optional[str] = None
    scan_updated_at: Optional[datetime] = None


class FileReferenceUpdate(BaseModel):
    alternative: str = Field(..., max_length=1000)


class FileReferenceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    page_id: int
    file_id: int
    language_id: int
    alternative: Optional[str] = None


class MissingAltTextItem(BaseModel):
    file_reference_id: int
    file_id: int
    file_name: str
    edit_link: RecordEditLink
    # None when alt-text generation is disabled or the file type is unsupported
    generate_demand: Optional[dict] = None


class MissingAltTextResponse(BaseModel):
    page_id: int
    language_id: int
    items: List[MissingAltTextItem]
    count: int
