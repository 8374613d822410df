"""
Structure Schemas

Heading and landmark trees extracted from a page preview, plus the
accessibility errors found in them. Elements rendered from an editable
record carry that record's origin so the editor can jump to it or change
its heading level or landmark role in place.
"""
import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.features.pages.schemas.page import RecordEditLink

# Heading level value that renders the element with its fallback tag instead of a heading
NO_HEADING_LEVEL = -1


class Severity(str, enum.Enum):
    error = "error"
    warning = "warning"


class LandmarkRole(str, enum.Enum):
    banner = "banner"
    main = "main"
    navigation = "navigation"
    complementary = "complementary"
    contentinfo = "contentinfo"
    region = "region"
    search = "search"
    form = "form"


class StructureIssue(BaseModel):
    """One kind of error and how many elements it applies to."""
    id: str
    severity: Severity
    count: int = 1


class RecordOrigin(BaseModel):
    table: str
    column: str
    uid: int
    edit_link: RecordEditLink


class HeadingNode(BaseModel):
    level: int
    text: str
    skipped_levels: int = 0
    errors: List[str] = Field(default_factory=list)
    record: Optional[RecordOrigin] = None
    children: List["HeadingNode"] = Field(default_factory=list)


class LandmarkNode(BaseModel):
    role: str
    label: str = ""
    tag: str
    errors: List[str] = Field(default_factory=list)
    record: Optional[RecordOrigin] = None
    children: List["LandmarkNode"] = Field(default_factory=list)


class StructureResponse(BaseModel):
    page_id: int
    preview_url: str
    headings: List[HeadingNode]
    landmarks: List[LandmarkNode]
    errors: List[StructureIssue]

    class Config:
        json_schema_extra = {
            "example": {
                "page_id": 5,
                "preview_url": "https://example.com/about",
                "headings": [
                    {
                        "level": 1,
                        "text": "About",
                        "skipped_levels": 0,
                        "errors": [],
                        "record": {
                            "table": "content_elements",
                            "column": "heading_level",
                            "uid": 12,
                            "edit_link": {
                                "uri": "/api/v1/content-elements/12",
                                "label": "About (content_elements:12, heading_level)",
                            },
                        },
                        "children": [],
                    }
                ],
                "landmarks": [{"role": "main", "label": "", "tag": "main", "errors": [], "record": None, "children": []}],
                "errors": [],
            }
        }


class ContentElementUpdate(BaseModel):
    """
    Change how a content element is exposed to assistive technology.

    ``heading_level`` is 1-6, or -1 to render the fallback tag. An empty
    ``landmark_role`` removes the landmark.
    """
    heading_level: Optional[int] = None
    landmark_role: Optional[str] = None

    @model_validator(mode="after")
    def _check_values(self):
        if self.heading_level is None and self.landmark_role is None:
            raise ValueError("Provide heading_level or landmark_role")
        if self.heading_level is not None and self.heading_level != NO_HEADING_LEVEL and not 1 <= self.heading_level <= 6:
            raise ValueError("heading_level must be between 1 and 6, or -1")
        if self.landmark_role:
            LandmarkRole(self.landmark_role)
        return self


class ContentElementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    page_id: int
    language_id: int
    header: str
    heading_level: int
    landmark_role: str
