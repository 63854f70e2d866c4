# app/config.py
import os
from dataclasses import dataclass, field
from typing import List, Optional

# Server settings come from environment variables so the same image can run
# locally (127.0.0.1:8085) or inside docker-compose (api:8085).


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 8085
    log_level: str = "INFO"
    catalog_path: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.getenv("PYSTORE_HOST", "0.0.0.0"),
            port=int(os.getenv("PYSTORE_PORT", "8085")),
            log_level=os.getenv("PYSTORE_LOG_LEVEL", "INFO").upper(),
            catalog_path=os.getenv("PYSTORE_CATALOG_PATH") or None,
            cors_origins=_split_origins(os.getenv("PYSTORE_CORS_ORIGINS", "*")),
        )
