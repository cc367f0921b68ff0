"""RequestHandler — cache-fronted validation for the HTTP surface.

Transport-agnostic: takes the raw path/query strings and returns a
:class:`HandlerResponse` the web app turns into an HTTP response.

INVARIANT: A cache hit returns the stored status code and body verbatim
and never invokes the pipeline.
INVARIANT: Only outcomes the pipeline marks cacheable are stored.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from http import HTTPStatus

import structlog

from ibanctl.domain.requests import ValidationRequest, derive_cache_key
from ibanctl.infrastructure.cache import NO_EXPIRY, ResponseCache
from ibanctl.services.pipeline import ValidationPipeline

log = structlog.get_logger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class CachedResponse:
    """What the cache stores: the status code travels with the body."""

    status_code: int
    body: bytes


@dataclass(frozen=True)
class HandlerResponse:
    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)
    cache_hit: bool = False


def response_headers(body: bytes) -> dict[str, str]:
    return {
        "Content-Type": JSON_CONTENT_TYPE,
        "Content-Length": str(len(body)),
        "Access-Control-Allow-Origin": "*",
    }


class RequestHandler:
    """Serves validation requests from cache or through the pipeline.

    Args:
        pipeline: The validation pipeline to run on cache misses.
        cache: Shared response cache.
        ttl: Lifetime of cached responses in seconds (0 = never expires).
    """

    def __init__(
        self,
        pipeline: ValidationPipeline,
        cache: ResponseCache,
        *,
        ttl: float = NO_EXPIRY,
    ) -> None:
        self._pipeline = pipeline
        self._cache = cache
        self._ttl = ttl
        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def handle(
        self,
        iban: str,
        validate_bank_code: str | None = None,
        get_bic: str | None = None,
    ) -> HandlerResponse:
        request = ValidationRequest.from_query(iban, validate_bank_code, get_bic)
        key = derive_cache_key(request)

        cached, found = self._cache.get(key)
        if found:
            self._count(hit=True)
            log.debug("cache.hit", key=key)
            return HandlerResponse(
                status_code=cached.status_code,
                body=cached.body,
                headers=response_headers(cached.body),
                cache_hit=True,
            )

        self._count(hit=False)
        log.debug("cache.miss", key=key)
        outcome = self._pipeline.run(request)

        try:
            body = outcome.result.to_json().encode("utf-8")
        except Exception:
            log.exception("response.serialize_failed", iban=request.iban)
            return HandlerResponse(
                status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
                body=b"",
                headers=response_headers(b""),
            )

        if outcome.cacheable:
            self._cache.set(key, CachedResponse(int(outcome.status_code), body), self._ttl)
        elif outcome.status_code == HTTPStatus.BAD_REQUEST:
            log.info("request.rejected", reason="empty identifier")

        return HandlerResponse(
            status_code=int(outcome.status_code),
            body=body,
            headers=response_headers(body),
        )

    def stats(self) -> dict[str, int]:
        """Cache hit/miss counters since startup."""
        with self._stats_lock:
            return {"hits": self._hits, "misses": self._misses, "entries": len(self._cache)}

    def _count(self, *, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1
