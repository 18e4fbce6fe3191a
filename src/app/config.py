"""Configuration management using Pydantic settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "DRIFTWHEEL"
    debug: bool = False  # also gates the diagnostics endpoints

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Motion controller
    motion_enabled: bool = True
    motion_profiles_path: str = ""      # JSON profile document; empty = built-in
    motion_variant: str = ""            # variant name inside the document; empty = default
    motion_seed: Optional[int] = None   # None = fresh trajectory every start
    motion_frame_rate: float = 60.0

    # Headless viewport (until a client reports its real size)
    viewport_width: float = 1280.0
    viewport_height: float = 720.0

    # Diagnostics trace log (JSON lines)
    diagnostics_log_dir: Path = Path("./logs")
    diagnostics_log_name: str = "wheel-trace.ndjson"
    diagnostics_max_read_bytes: int = 256 * 1024
    diagnostics_trace_every: int = 10   # frames between controller trace records

    @property
    def diagnostics_log_path(self) -> Path:
        return self.diagnostics_log_dir / self.diagnostics_log_name


settings = Settings()
