from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from ga4_bridge.config import Settings, load_settings
from ga4_bridge.forwarding.ga4_client import Ga4Client


@lru_cache(maxsize=1)
def _settings() -> Settings:
    return load_settings()


def get_settings() -> Settings:
    return _settings()


def get_ga4_client(settings: Settings = Depends(get_settings)) -> Ga4Client:
    return Ga4Client.from_settings(settings)
