# app/config.py
import os
from typing import Mapping, Optional

from pydantic import BaseModel


class Settings(BaseModel):
    record_store_url: Optional[str] = None
    record_store_token: Optional[str] = None
    record_store_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            record_store_url=env.get("RECORD_STORE_URL") or None,
            record_store_token=env.get("RECORD_STORE_TOKEN") or None,
            record_store_timeout=float(env.get("RECORD_STORE_TIMEOUT") or 10.0),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
