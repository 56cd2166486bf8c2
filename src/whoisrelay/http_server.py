"""
HTTP front end for the WHOIS relay.

A single ``q`` parameter drives a lookup. Programmatic callers get JSON,
everyone else gets plain text; an empty ``q`` shows a bare lookup form.
Every response is marked uncacheable, since stale WHOIS data misleads.
"""

from typing import Any, Optional

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel, Field

from whoisrelay import __version__
from whoisrelay.config import Config
from whoisrelay.errors import InvalidQueryError, RateLimitedError, WhoisRelayError
from whoisrelay.logging_setup import configure_logging
from whoisrelay.models import ErrorPayload, LookupResult
from whoisrelay.services.concurrent_service import ConcurrentLookupService
from whoisrelay.services.whois_service import WhoisService
from whoisrelay.utils.rate_limiter import RateLimiter
from whoisrelay.utils.validators import ensure_valid_query

logger = structlog.get_logger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}

TEXT_ERRORS = {
    InvalidQueryError.code: "ERROR: Query must be a valid domain name or IP address.\n",
    RateLimitedError.code: "ERROR: Rate limit exceeded. Try again later.\n",
}

FORM_PAGE = """<!doctype html>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>WHOIS lookup</title>
<h1>WHOIS lookup</h1>
<form method="get">
  <label>Domain or IP <input type="text" name="q" placeholder="example.com or 1.2.3.4"></label>
  <button type="submit">Lookup</button>
</form>
"""


class BulkLookupRequest(BaseModel):
    """Request model for bulk lookups."""
    targets: list[str] = Field(..., min_length=1, description="List of domains/IPs to lookup")
    max_concurrent: int = Field(10, description="Maximum concurrent lookups", ge=1, le=50)


def wants_json(request: Request) -> bool:
    """Whether the caller is a programmatic client rather than a browser."""
    params = request.query_params
    if "ajax" in params or params.get("format") == "json":
        return True

    if request.headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return True

    accept = request.headers.get("accept", "")
    return "application/json" in accept and "text/html" not in accept


def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def render_text(result: LookupResult) -> str:
    return (
        f"WHOIS: {result.query}\n"
        f"Queried server: {result.server}\n"
        f"\n"
        f"{result.result or '(no response)'}\n"
    )


class HTTPRelayServer:
    """Wires validation, throttling and lookups together for HTTP callers."""

    def __init__(
        self,
        config: Config,
        whois_service: Optional[WhoisService] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self.config = config
        self.whois_service = whois_service or WhoisService(config)
        self.rate_limiter = rate_limiter or RateLimiter(config)
        self.concurrent_service = ConcurrentLookupService(config, self.whois_service)

        self.server_info = {"name": "whoisrelay-http", "version": __version__}

    async def handle_single_lookup(self, raw_query: str, client_id: str) -> LookupResult:
        """Validate, throttle, then look up. Invalid queries never reach the network."""
        query = ensure_valid_query(raw_query)

        if not await self.rate_limiter.allow(client_id):
            raise RateLimitedError()

        return await self.whois_service.lookup(query)


def create_app(config: Config | None = None, server: HTTPRelayServer | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    cfg = config or (server.config if server else Config.from_env())
    cfg.validate()
    configure_logging(cfg.log_level)

    app = FastAPI(title="WhoisRelay HTTP Server", version=__version__)
    app.state.relay = server or HTTPRelayServer(cfg)

    @app.on_event("startup")
    async def startup_event():
        logger.info("HTTP relay started", rate_limit_interval=cfg.rate_limit_interval)

    @app.middleware("http")
    async def no_cache_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(NO_CACHE_HEADERS)
        return response

    @app.exception_handler(InvalidQueryError)
    @app.exception_handler(RateLimitedError)
    async def relay_error_handler(request: Request, exc: WhoisRelayError):
        logger.info("Lookup refused", error=exc.code, client=client_identity(request))
        if wants_json(request):
            payload = ErrorPayload(**exc.to_payload())
            return JSONResponse(payload.model_dump(), status_code=exc.status_code)
        return PlainTextResponse(TEXT_ERRORS[exc.code], status_code=exc.status_code)

    @app.get("/")
    async def lookup(request: Request, q: Optional[str] = None):
        """Look up ``q``; without it, show the lookup form."""
        if q is None or q == "":
            return HTMLResponse(FORM_PAGE)

        relay: HTTPRelayServer = request.app.state.relay
        result = await relay.handle_single_lookup(q, client_identity(request))

        if wants_json(request):
            return JSONResponse(result.model_dump())
        return PlainTextResponse(render_text(result))

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, Any]:
        """Health check endpoint."""
        relay: HTTPRelayServer = request.app.state.relay
        return {"status": "healthy", "server": relay.server_info}

    @app.post("/bulk")
    async def bulk_lookup_stream(request: Request, body: BulkLookupRequest):
        """Streaming endpoint for bulk lookups (NDJSON)."""
        relay: HTTPRelayServer = request.app.state.relay
        if len(body.targets) > cfg.max_bulk_targets:
            raise HTTPException(
                status_code=400,
                detail=f"Too many targets: {len(body.targets)} > {cfg.max_bulk_targets}",
            )

        if not await relay.rate_limiter.allow(client_identity(request)):
            raise RateLimitedError()

        async def generate():
            async for item in relay.concurrent_service.bulk_lookup(
                targets=body.targets, max_concurrent=body.max_concurrent
            ):
                yield item.model_dump_json() + "\n"

        return StreamingResponse(generate(), media_type="application/x-ndjson")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
