"""
Exception handlers that keep every error in the {"success": false, "error": ...} envelope.

ServiceError is mapped by the routers themselves.
Register these on a FastAPI app instance via `register_exception_handlers(app)`.
"""
import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Champs requis manquants"
INVALID_FIELDS = "Champs invalides"
INTERNAL_ERROR = "Erreur interne du serveur"

# Pydantic error types that mean "field absent or empty" (also covers a non-JSON body)
_MISSING_ERROR_TYPES = {"missing", "string_too_short", "json_invalid", "model_attributes_type"}
# null or "" on these counts as missing whatever validator rejected it
REQUIRED_FIELDS = {"first_name", "last_name", "email", "phone"}


def _is_missing(err: Dict[str, Any]) -> bool:
    if err.get("type") in _MISSING_ERROR_TYPES:
        return True
    loc = err.get("loc", ())
    field = loc[1] if len(loc) > 1 else None
    return field in REQUIRED_FIELDS and err.get("input") in (None, "")


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(_is_missing(err) for err in errors):
        content = {"success": False, "error": MISSING_FIELDS}
    else:
        details = [
            {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
            for err in errors
        ]
        content = {"success": False, "error": INVALID_FIELDS, "details": jsonable_encoder(details)}
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unhandled errors: full traceback in logs, generic envelope to the client."""
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": INTERNAL_ERROR},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the given FastAPI app."""
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
