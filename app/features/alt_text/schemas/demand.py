from typing import ClassVar, Tuple

from app.platform.signing import SignedDemand


class GenerateAltTextDemand(SignedDemand):
    """
    Demand for generating alternative text for the image behind a record.

    ``record_columns`` are the columns the editor is allowed to fill with the
    generated text. Their order is part of the signature.
    """

    signed_fields: ClassVar[tuple] = (
        "user_id",
        "page_id",
        "language_id",
        "workspace_id",
        "record_table",
        "record_id",
        "file_id",
        "record_columns",
    )

    user_id: int
    page_id: int
    language_id: int
    workspace_id: int
    record_table: str
    record_id: int
    file_id: int
    record_columns: Tuple[str, ...]
