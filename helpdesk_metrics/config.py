from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    server_name: str
    static_dir: Path | None
    log_level: str
    cors_origins: list[str]


def get_settings() -> Settings:
    static_dir = os.getenv("HELPDESK_STATIC_DIR", "").strip()
    origins = os.getenv("HELPDESK_CORS_ORIGINS", "*")

    return Settings(
        host=os.getenv("HELPDESK_HOST", "127.0.0.1"),
        port=int(os.getenv("HELPDESK_PORT", "2222")),
        server_name=os.getenv("HELPDESK_SERVER_NAME", "fastapi"),
        static_dir=Path(static_dir) if static_dir else None,
        log_level=os.getenv("HELPDESK_LOG_LEVEL", "INFO").upper(),
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
    )
