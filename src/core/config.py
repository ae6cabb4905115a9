"""Runtime settings, read from environment variables."""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Self

# Grid sizes offered by the client (5x5, 10x10, 20x20). The server accepts anything in between.
DEFAULT_GRID_SIZE = 10
MIN_GRID_SIZE = 2
MAX_GRID_SIZE = 20

ROOM_ID_LENGTH = 6
FINISHED_ROOM_TTL_SEC = 60 * 5
IDLE_ROOM_TTL_SEC = 60 * 30


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}.") from exc


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    default_grid_size: int = DEFAULT_GRID_SIZE
    min_grid_size: int = MIN_GRID_SIZE
    max_grid_size: int = MAX_GRID_SIZE
    room_id_length: int = ROOM_ID_LENGTH
    finished_room_ttl: int = FINISHED_ROOM_TTL_SEC
    idle_room_ttl: int = IDLE_ROOM_TTL_SEC
    log_level: str = "INFO"
    log_format: str = "simple"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        if self.min_grid_size < MIN_GRID_SIZE:
            raise ValueError(
                f"min_grid_size must be at least {MIN_GRID_SIZE} (a single box), got {self.min_grid_size}."
            )
        if self.min_grid_size > self.max_grid_size:
            raise ValueError(
                f"min_grid_size ({self.min_grid_size}) is larger than max_grid_size ({self.max_grid_size})."
            )
        if not self.min_grid_size <= self.default_grid_size <= self.max_grid_size:
            raise ValueError(
                f"default_grid_size {self.default_grid_size} outside [{self.min_grid_size}, {self.max_grid_size}]."
            )
        if self.room_id_length < 4:
            raise ValueError(f"room_id_length too short: {self.room_id_length}")
        if self.finished_room_ttl < 0 or self.idle_room_ttl < 0:
            raise ValueError("Room TTLs cannot be negative.")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Self:
        """Build the settings from DOTS_* environment variables (falls back on the defaults)."""
        env = os.environ if env is None else env
        origins = env.get("DOTS_CORS_ORIGINS", "*")
        return cls(
            host=env.get("DOTS_HOST", "0.0.0.0"),
            port=_read_int(env, "DOTS_PORT", 8000),
            default_grid_size=_read_int(env, "DOTS_DEFAULT_GRID_SIZE", DEFAULT_GRID_SIZE),
            min_grid_size=_read_int(env, "DOTS_MIN_GRID_SIZE", MIN_GRID_SIZE),
            max_grid_size=_read_int(env, "DOTS_MAX_GRID_SIZE", MAX_GRID_SIZE),
            room_id_length=_read_int(env, "DOTS_ROOM_ID_LENGTH", ROOM_ID_LENGTH),
            finished_room_ttl=_read_int(env, "DOTS_FINISHED_ROOM_TTL_SEC", FINISHED_ROOM_TTL_SEC),
            idle_room_ttl=_read_int(env, "DOTS_IDLE_ROOM_TTL_SEC", IDLE_ROOM_TTL_SEC),
            log_level=env.get("DOTS_LOG_LEVEL", "INFO"),
            log_format=env.get("DOTS_LOG_FORMAT", "simple"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
