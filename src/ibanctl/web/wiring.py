"""Composition root for the HTTP service.

Every collaborator is constructed explicitly and injected; nothing here
is process-global, so tests can wire as many isolated services as they like.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ibanctl.infrastructure.cache import ResponseCache
from ibanctl.services.pipeline import ValidationPipeline
from ibanctl.web.app import create_app
from ibanctl.web.handler import RequestHandler

if TYPE_CHECKING:
    from fastapi import FastAPI

    from ibanctl.config.settings import IbanSettings
    from ibanctl.domain.bank_codes import BankDataRepository


@dataclass(frozen=True)
class Service:
    cache: ResponseCache
    pipeline: ValidationPipeline
    handler: RequestHandler
    app: FastAPI


def wire_service(
    settings: IbanSettings,
    repository: BankDataRepository,
    *,
    pipeline: ValidationPipeline | None = None,
) -> Service:
    """Build cache, pipeline, handler, and app around *repository*."""
    cache = ResponseCache()
    pipeline = pipeline or ValidationPipeline(repository)
    handler = RequestHandler(pipeline, cache, ttl=settings.cache.ttl)
    return Service(cache=cache, pipeline=pipeline, handler=handler, app=create_app(handler))
