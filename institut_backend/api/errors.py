"""Exception handlers shared by every router.

Lookups that miss raise ``RecordNotFound`` deep in the repositories; constraint
violations surface as SQLAlchemy ``IntegrityError``. Both are translated once
here instead of in each route:

    from institut_backend.api.errors import setup_exception_handlers
    setup_exception_handlers(app)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from institut_core.repositories.base import RecordNotFound

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"


async def record_not_found_handler(request: Request, exc: RecordNotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc) or "Introuvable"})


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    code = getattr(exc.orig, "pgcode", None)
    if code == FOREIGN_KEY_VIOLATION:
        detail = "Enregistrement référencé ou référence inexistante"
    elif code == UNIQUE_VIOLATION:
        detail = "Valeur déjà utilisée"
    else:
        detail = "Contrainte d'intégrité violée"
    logger.warning("IntegrityError %s sur %s %s", code, request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": detail})


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecordNotFound, record_not_found_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
