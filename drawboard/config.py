import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


DEFAULT_PORT = 3001
DEFAULT_CELL_SIZE = 200
DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


def _origins_env(name: str) -> List[str]:
    raw = os.getenv(name, "*").strip()
    if not raw or raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    """Service configuration, handed to ``create_app`` explicitly."""

    drawings_dir: Path = Path("drawings")
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cell_size: int = DEFAULT_CELL_SIZE
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            drawings_dir=Path(os.getenv("DRAWINGS_DIR", "").strip() or "drawings"),
            host=os.getenv("HOST", "").strip() or "0.0.0.0",
            port=_int_env("PORT", DEFAULT_PORT),
            cell_size=_int_env("CELL_SIZE", DEFAULT_CELL_SIZE),
            max_body_bytes=_int_env("MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
            cors_origins=_origins_env("CORS_ORIGINS"),
            log_level=(os.getenv("LOG_LEVEL", "").strip() or "INFO").upper(),
        )
