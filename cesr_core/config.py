# cesr_core/config.py
"""
Runtime settings resolver.

Each value comes from the explicit config dict, else the environment,
else the default. Code tables are protocol constants and are never
configurable.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import os

STREAM_DOMAINS = ("txt", "bin")


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_file: Optional[str] = None
    stream_domain: str = "txt"  # "txt" (qb64) | "bin" (qb2)


def load_settings(config: dict | None = None) -> Settings:
    config = config or {}

    log_level = (config.get("log_level") or os.getenv("CESR_LOG_LEVEL", "INFO")).upper()
    log_file = config.get("log_file") or os.getenv("CESR_LOG_FILE") or None
    domain = (config.get("stream_domain") or os.getenv("CESR_STREAM_DOMAIN", "txt")).lower()

    if domain not in STREAM_DOMAINS:
        raise ValueError(f"Unknown stream domain: {domain}")

    return Settings(log_level=log_level, log_file=log_file, stream_domain=domain)
