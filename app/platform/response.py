from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Wrap ``data`` in the ``{status_code, status, message, data}`` envelope.

    ``status`` is "error" for 4xx/5xx codes. Missing data becomes ``{}``.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "status": "error" if status_code >= 400 else "success",
            "message": message,
            "data": jsonable_encoder(data) if data is not None else {},
        },
    )


def error_detail(title: str, description: str) -> dict:
    """Detail payload for HTTPException, rendered as data.error by the exception handlers."""
    return {"title": title, "description": description}


def error_response(status_code: int, title: str, description: str, message: Optional[str] = None) -> JSONResponse:
    return api_response(
        message=message or title,
        status_code=status_code,
        data={"error": error_detail(title, description)},
    )
