"""Server settings, read from the environment (and a .env file if present)."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    host: str = "localhost"
    port: int = 9877
    timeout: float = 15.0
    settle_delay: float = 0.05
    holding_area_start: float = 40000.0
    max_slices: int = 64
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            host=os.environ.get("ARRANGEMENT_MCP_HOST", cls.host),
            port=int(os.environ.get("ARRANGEMENT_MCP_PORT", cls.port)),
            timeout=float(os.environ.get("ARRANGEMENT_MCP_TIMEOUT", cls.timeout)),
            settle_delay=float(os.environ.get("ARRANGEMENT_MCP_SETTLE_DELAY", cls.settle_delay)),
            holding_area_start=float(
                os.environ.get("ARRANGEMENT_MCP_HOLDING_AREA", cls.holding_area_start)
            ),
            max_slices=int(os.environ.get("ARRANGEMENT_MCP_MAX_SLICES", cls.max_slices)),
            log_level=os.environ.get("ARRANGEMENT_MCP_LOG_LEVEL", cls.log_level).upper(),
        )


_settings = None


def get_settings() -> Settings:
    """Settings are loaded once per process."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
