"""
Read the editable record behind a rendered element.

The host renders headings and landmarks from content records with
``data-a11y-record-table``, ``-column`` and ``-uid`` attributes, plus an
optional ``-edit-link`` pointing at its own record editor.
"""
from typing import Optional

from bs4 import Tag

from app.features.pages.schemas.page import RecordEditLink
from app.features.pages.services.page_service import build_edit_link
from app.features.structure.schemas.structure import RecordOrigin

RECORD_TABLE_ATTR = "data-a11y-record-table"
RECORD_COLUMN_ATTR = "data-a11y-record-column"
RECORD_UID_ATTR = "data-a11y-record-uid"
RECORD_EDIT_LINK_ATTR = "data-a11y-record-edit-link"


def read_record_origin(element: Tag, label: str = "") -> Optional[RecordOrigin]:
    """Return the element's record origin, or None if it was not rendered from one."""
    table = (element.get(RECORD_TABLE_ATTR) or "").strip()
    column = (element.get(RECORD_COLUMN_ATTR) or "").strip()
    try:
        uid = int(element.get(RECORD_UID_ATTR) or "")
    except ValueError:
        return None
    if not table or not column or uid <= 0:
        return None

    edit_link = build_edit_link(table, uid, column, label or table)
    host_uri = (element.get(RECORD_EDIT_LINK_ATTR) or "").strip()
    if host_uri:
        edit_link = RecordEditLink(uri=host_uri, label=edit_link.label)

    return RecordOrigin(table=table, column=column, uid=uid, edit_link=edit_link)
