"""FastAPI application binding the RequestHandler to its routes.

Routes:
- GET /validate/{iban}?validateBankCode=&getBIC=
- GET /validate/  (empty identifier, answered with 400)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from ibanctl import __version__
from ibanctl.web.handler import HandlerResponse, RequestHandler

ValidateBankCodeParam = Annotated[str | None, Query(alias="validateBankCode")]
GetBicParam = Annotated[str | None, Query(alias="getBIC")]


def _to_response(result: HandlerResponse) -> Response:
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )


def create_app(handler: RequestHandler) -> FastAPI:
    """Build the ASGI app around an already wired *handler*."""
    app = FastAPI(
        title="ibanctl",
        description="IBAN validation service",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
    )

    # Sync endpoints run on the threadpool: one worker per in-flight request.
    @app.get("/validate/")
    def validate_empty(
        validate_bank_code: ValidateBankCodeParam = None,
        get_bic: GetBicParam = None,
    ) -> Response:
        return _to_response(handler.handle("", validate_bank_code, get_bic))

    @app.get("/validate/{iban}")
    def validate(
        iban: str,
        validate_bank_code: ValidateBankCodeParam = None,
        get_bic: GetBicParam = None,
    ) -> Response:
        return _to_response(handler.handle(iban, validate_bank_code, get_bic))

    return app
