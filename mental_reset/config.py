"""
Runtime configuration, read from the environment.

A local ``.env`` file is loaded first; variables already set in the process
environment win.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .gateway import DEFAULT_TABLE
from .policy import DEFAULT_ACTIVITY_LIMIT


@dataclass(frozen=True)
class Settings:
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    table: str = DEFAULT_TABLE
    activity_limit: int = DEFAULT_ACTIVITY_LIMIT
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def load_settings() -> Settings:
    load_dotenv()

    limit = int(os.getenv("MENTAL_RESET_ACTIVITY_LIMIT", str(DEFAULT_ACTIVITY_LIMIT)))
    if limit < 0:
        raise ValueError("MENTAL_RESET_ACTIVITY_LIMIT must be 0 or more")

    return Settings(
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
        table=os.getenv("MENTAL_RESET_TABLE", DEFAULT_TABLE),
        activity_limit=limit,
        log_level=os.getenv("MENTAL_RESET_LOG_LEVEL", "INFO").upper(),
        host=os.getenv("MENTAL_RESET_HOST", "0.0.0.0"),
        port=int(os.getenv("MENTAL_RESET_PORT", "8000")),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
