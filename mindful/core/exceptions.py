import logging
from fastapi import status
from fastapi.responses import JSONResponse
from fastapi.requests import Request

logger = logging.getLogger(__name__)


# ---------------------------
# Service (Business logic)
# ---------------------------

class BusinessError(Exception):
    """Base class for all business logic errors."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str = "Bad request"):
        super().__init__(detail)
        self.detail = detail


class BadRequestError(BusinessError):
    """Raised when a request is malformed (e.g., an unverifiable webhook payload)."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BusinessError):
    """Raised when a requested resource does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BusinessError):
    """Raised when a resource already exists or conflicts with another resource."""
    status_code = status.HTTP_409_CONFLICT


class PermissionDeniedError(BusinessError):
    """Raised when a user does not have permission to perform an action."""
    status_code = status.HTTP_403_FORBIDDEN


class UnauthorizedError(BusinessError):
    """Raised when authentication fails."""
    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(BusinessError):
    """Raised when business rule validation fails (e.g., invalid input)."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class QuotaExceededError(BusinessError):
    """Raised when the user's subscription tier does not allow more requests."""
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class ExternalServiceError(BusinessError):
    """Raised when a third-party provider (payments, LLM) fails."""
    status_code = status.HTTP_502_BAD_GATEWAY


class ServiceError(BusinessError):
    """Generic error for unexpected service failures."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ---------------------------
# FastAPI Exception Handlers
# ---------------------------

def register_exception_handlers(app):
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.error(f"Service error: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Internal server error"},
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_handler(request: Request, exc: ExternalServiceError):
        logger.warning(f"External service error on {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )
