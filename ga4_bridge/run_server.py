from __future__ import annotations

import argparse
import sys

import uvicorn
from loguru import logger

from ga4_bridge.config import Settings, load_settings

APP_PATH = "ga4_bridge.api.webhook_app:app"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Serve the Shopify order webhook that forwards purchases to GA4.")
    p.add_argument("--host", default=None, help="Bind address (defaults to GA4_BRIDGE_HOST).")
    p.add_argument("--port", type=int, default=None, help="Bind port (defaults to GA4_BRIDGE_PORT).")
    p.add_argument("--reload", action="store_true", help="Enable Uvicorn reload (dev only).")
    return p.parse_args(argv)


def _describe(settings: Settings) -> str:
    target = "GA4 DEBUG" if settings.debug_enabled else "GA4"
    verification = "on" if settings.webhook_secret() else "off"
    return f"measurement_id={settings.ga4_measurement_id} target={target} hmac={verification}"


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Configuration errors surface here instead of on the first webhook.
    try:
        settings = load_settings()
    except RuntimeError as exc:
        logger.error("{}", exc)
        return 1

    host = args.host or settings.bridge_host
    port = args.port or settings.bridge_port
    logger.info("starting bridge on {}:{} ({})", host, port, _describe(settings))

    uvicorn.run(
        APP_PATH,
        host=host,
        port=port,
        reload=bool(args.reload),
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
