from __future__ import annotations

import os
import sys
from typing import Any

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from ga4_bridge.api.dependencies import get_ga4_client, get_settings
from ga4_bridge.api.handlers import forward_order
from ga4_bridge.api.security import require_shopify_signature
from ga4_bridge.config import Settings
from ga4_bridge.errors import CollectorUnavailableError, MalformedOrderError
from ga4_bridge.forwarding.ga4_client import Ga4Client

logger.remove()
logger.add(sys.stderr, level=os.getenv("LOG_LEVEL", "INFO").upper())

WEBHOOK_PATH = "/api/shopify-webhook"

app = FastAPI(title="Shopify GA4 Bridge", version="1.0.0")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@app.exception_handler(StarletteHTTPException)
async def _http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(
        {"error": message}, status_code=exc.status_code, headers=exc.headers
    )


@app.exception_handler(Exception)
async def _unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("unhandled error on {} {}", request.method, request.url.path)
    return _error(500, "Internal error")


@app.get("/")
def root() -> JSONResponse:
    return JSONResponse(
        {
            "service": app.title,
            "status": "ok",
            "endpoints": {
                "health": "/health",
                "webhook": WEBHOOK_PATH,
                "docs": "/docs",
            },
        }
    )


@app.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(status_code=204)


@app.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "status": "ok",
        "debug_mode": settings.debug_enabled,
        "signature_verification": settings.webhook_secret() is not None,
    }


@app.post(WEBHOOK_PATH)
async def shopify_webhook(
    raw_body: bytes = Depends(require_shopify_signature),
    client: Ga4Client = Depends(get_ga4_client),
) -> JSONResponse:
    try:
        result = await forward_order(raw_body, client)
    except MalformedOrderError as exc:
        logger.warning("malformed order body: {}", exc)
        return _error(500, "Internal error")
    except CollectorUnavailableError as exc:
        logger.error("forwarding failed: {}", exc)
        return _error(500, "Internal error")
    except Exception:
        logger.exception("webhook processing failed")
        return _error(500, "Internal error")
    return JSONResponse(result)
