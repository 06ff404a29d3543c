"""
Gestionnaires d'exceptions.
- CheckoutError (taxonomie pixelglow.errors) -> {"error": ...} avec son status_code;
  le diagnostic brut du fournisseur reste dans les logs.
- RequestValidationError -> 400 {"error": "Missing or invalid fields: ..."}.
- HTTPException -> {"error": detail} (même forme pour le front checkout).
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from pixelglow.errors import CheckoutError

logger = logging.getLogger(__name__)

def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query")]
    return ".".join(parts) or "body"

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s diagnostic=%s", type(exc).__name__, request.url.path, exc.message, exc.diagnostic)
        else:
            logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.public_body())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        fields = sorted({_field_name(err.get("loc", ())) for err in exc.errors()})
        return JSONResponse(status_code=400, content={"error": f"Missing or invalid fields: {', '.join(fields)}"})

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))
