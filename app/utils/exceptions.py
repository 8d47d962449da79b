import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.utils.response import error_response

logger = logging.getLogger(__name__)


class AppException(Exception):
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.data = data


class Unauthenticated(AppException):
    status_code = 401
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidCredentials(AppException):
    status_code = 401
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class Forbidden(AppException):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFound(AppException):
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(AppException):
    code = "VALIDATION_ERROR"


class DuplicateUsername(AppException):
    code = "DUPLICATE_USERNAME"

    def __init__(self, username: str):
        super().__init__("A user with this username already exists", data={"username": username})


class DuplicateVin(AppException):
    code = "DUPLICATE_VIN"

    def __init__(self, vin: str):
        super().__init__("A vehicle with this VIN already exists", data={"vin": vin})


class InvalidCategory(AppException):
    code = "INVALID_CATEGORY"


class UnsupportedFileType(AppException):
    code = "UNSUPPORTED_FILE_TYPE"


class FileTooLarge(AppException):
    code = "FILE_TOO_LARGE"


class UploadTimeout(AppException):
    status_code = 408
    code = "UPLOAD_TIMEOUT"


class NotificationFailed(AppException):
    status_code = 502
    code = "NOTIFICATION_FAILED"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, data=exc.data, code=exc.code),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_response(
                "Invalid request", data=jsonable_encoder(errors), code=ValidationError.code
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_response("Internal server error", code="INTERNAL_ERROR"),
        )
