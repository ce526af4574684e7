import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from askanai.core.config import Settings
from askanai.core.exceptions import ApiError
from askanai.core.security import no_store_headers

logger = logging.getLogger(__name__)

# first offending field of a request -> error code
FIELD_ERROR_CODES = {
    "title": "INVALID_TITLE",
    "description": "INVALID_DESCRIPTION",
    "questions": "INVALID_QUESTIONS",
    "settings": "INVALID_SETTINGS",
    "email": "INVALID_EMAIL",
    "password": "INVALID_PASSWORD",
    "answers": "INVALID_ANSWERS",
    "respondentName": "INVALID_ANSWERS",
    "body": "INVALID_COMMENT",
    "displayName": "INVALID_DISPLAY_NAME",
    "type": "INVALID_TYPE",
    "message": "INVALID_MESSAGE",
    "commentId": "INVALID_COMMENT_ID",
    "contentType": "UNSUPPORTED_FILE_TYPE",
    "fileName": "INVALID_FILE_NAME",
    "status": "INVALID_STATUS",
    "visibility": "INVALID_VISIBILITY",
    "allowComments": "INVALID_SETTINGS",
    "adminNote": "INVALID_ADMIN_NOTE",
    "page": "INVALID_PAGE",
}

HTTP_ERROR_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def validation_error_code(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "INVALID_BODY"
    loc = errors[0].get("loc") or ()
    if len(loc) < 2:
        # the body itself is missing or is not a JSON object
        return "INVALID_BODY"
    source, field = loc[0], str(loc[1])
    if source == "path":
        return f"INVALID_{field.upper()}"
    return FIELD_ERROR_CODES.get(field, "INVALID_BODY")


def error_response(status_code: int, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, ex: ApiError):
        if ex.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {ex}")
        return error_response(ex.status_code, ex.code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, ex: RequestValidationError):
        return error_response(400, validation_error_code(ex))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, ex: StarletteHTTPException):
        return error_response(ex.status_code, HTTP_ERROR_CODES.get(ex.status_code, "HTTP_ERROR"))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, ex: Exception):
        logger.error(f"{request.method} {request.url.path} failed: {ex}", exc_info=ex)
        return error_response(500, "INTERNAL_ERROR")


CORS_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
CORS_HEADERS = ["content-type", "authorization", "x-creator-key"]


def register_middleware(app: FastAPI, settings: Settings) -> None:
    @app.middleware("http")
    async def no_store(request: Request, call_next):
        if request.method == "OPTIONS":
            response = JSONResponse(status_code=200, content={"ok": True})
        else:
            try:
                response = await call_next(request)
            except Exception as ex:
                # rendered here so 500s still pass through the CORS layer
                logger.error(f"{request.method} {request.url.path} failed: {ex}", exc_info=ex)
                response = error_response(500, "INTERNAL_ERROR")
        response.headers.update(no_store_headers())
        return response

    # registered last, so it wraps the middleware above and answers preflights itself
    origins = settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=bool(origins),
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )
