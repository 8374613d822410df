from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class Page(BaseModel):

    __tablename__ = "pages"

    title = Column(String(255), nullable=False, default="")
    preview_url = Column(Text, nullable=False, default="")
    workspace_id = Column(Integer, default=0, nullable=False, index=True)

    # Last remote scan started for this page; cleared by scripts/cleanup_scans.py
    scan_id = Column(String(128), nullable=True, index=True)
    scan_updated_at = Column(DateTime, nullable=True)

    file_references = relationship(
        "FileReference", back_populates="page", cascade="all, delete-orphan"
    )


class MediaFile(BaseModel):

    __tablename__ = "media_files"

    name = Column(String(255), nullable=False)
    extension = Column(String(16), nullable=False, default="")
    mime_type = Column(String(128), nullable=False, default="application/octet-stream")
    storage_path = Column(Text, nullable=False)


class FileReference(BaseModel):
    """Usage of a media file on a page. ``alternative`` holds the alt text."""

    __tablename__ = "file_references"

    page_id = Column(Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)
    file_id = Column(Integer, ForeignKey("media_files.id", ondelete="CASCADE"), nullable=False, index=True)
    language_id = Column(Integer, default=0, nullable=False)
    alternative = Column(Text, nullable=True)

    page = relationship("Page", back_populates="file_references")
    file = relationship("MediaFile", lazy="joined")


class ContentElement(BaseModel):
    """
    A content block on a page. ``heading_level`` and ``landmark_role`` decide
    how its header and wrapper are rendered; the preview markup points back
    here through data-a11y-record-* attributes.
    """

    __tablename__ = "content_elements"

    page_id = Column(Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)
    language_id = Column(Integer, default=0, nullable=False)
    header = Column(String(255), nullable=False, default="")
    # 1-6, or -1 for the fallback tag
    heading_level = Column(Integer, nullable=False, default=2)
    landmark_role = Column(String(32), nullable=False, default="")
