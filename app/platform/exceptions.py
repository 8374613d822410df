from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import api_response, error_response

logger = get_logger(__name__)


class A11yError(Exception):
    """Base class for errors raised by the accessibility services."""


class SignatureMismatchError(A11yError):
    """A demand came back from the client with a signature that does not match its fields."""


class ContentFetchError(A11yError):
    """Preview content could not be fetched."""


class RemoteServiceError(A11yError):
    """A remote service (scanner, AI) failed in a way the caller must surface."""

    def __init__(self, message: str, title: str = "Remote service error"):
        super().__init__(message)
        self.title = title


def add_exception_handlers(app):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            return api_response(
                message=exc.detail.get("title") or "Error",
                status_code=exc.status_code,
                data={"error": exc.detail},
            )
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(SignatureMismatchError)
    async def signature_exception_handler(request: Request, exc: SignatureMismatchError):
        logger.warning(f"Rejected tampered demand on {request.url.path}: {exc}")
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid signature",
            "The request could not be verified. Reload the page and try again.",
        )

    @app.exception_handler(ContentFetchError)
    async def content_fetch_exception_handler(request: Request, exc: ContentFetchError):
        return error_response(status.HTTP_502_BAD_GATEWAY, "Preview could not be loaded", str(exc))

    @app.exception_handler(RemoteServiceError)
    async def remote_service_exception_handler(request: Request, exc: RemoteServiceError):
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.title, str(exc))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
