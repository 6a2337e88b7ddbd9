"""
API errors

Every error the service raises on purpose derives from ApiError and carries
the HTTP status it maps to. A single set of handlers turns them into
``{"message": ...}`` responses.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class PaymentError(ApiError):
    status_code = 502


class DatabaseNotConfigured(ApiError):
    status_code = 500

    def __init__(self, message: str = "Database not configured"):
        super().__init__(message)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid input"))
    return ", ".join(parts) or "Invalid input"


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": _validation_message(exc)})


def server_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"message": "Something went wrong, try again later"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
