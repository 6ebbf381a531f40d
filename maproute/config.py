import os
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, field

from dotenv import load_dotenv

# .env at the project root, if present; real environment variables win
load_dotenv(Path(__file__).parent.parent / ".env")


def _origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    average_speed_kmh: float = 40.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    event_limit: int = 1000

    def __post_init__(self):
        if self.average_speed_kmh <= 0:
            raise ValueError("average_speed_kmh must be positive")
        if self.event_limit <= 0:
            raise ValueError("event_limit must be positive")

    @classmethod
    def from_env(cls, env: Optional[dict] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            host=env.get("MAPROUTE_HOST", "0.0.0.0"),
            port=int(env.get("MAPROUTE_PORT", "3000")),
            average_speed_kmh=float(env.get("MAPROUTE_AVERAGE_SPEED_KMH", "40.0")),
            cors_origins=_origins(env.get("MAPROUTE_CORS_ORIGINS", "*")),
            event_limit=int(env.get("MAPROUTE_EVENT_LIMIT", "1000")),
        )
