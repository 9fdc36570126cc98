from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Engine defaults
    enable_compliance: bool = True
    enable_auto_check: bool = True
    check_interval_ms: float = 30_000  # per-probe interval unless overridden
    check_timeout_ms: float = 10_000  # per-probe timeout unless overridden

    # Probes file (absolute or relative to CWD)
    probes_file: str = "probes.yaml"

    # Infrastructure bundle
    disk_path: str = "/"

    # Logging
    log_level: str = "INFO"


settings = Settings()
