"""Display player configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings


class PlayerSettings(BaseSettings):
    server_url: str = "http://localhost:8080"
    credentials_file: Path = Path.home() / "signage" / "player" / "credentials.json"

    # Seconds. Ad advance, heartbeat and refresh polling run on separate timers.
    tick_interval: float = 1.0
    heartbeat_interval: float = 10.0
    refresh_interval: float = 3.0
    poll_interval: float = 5.0
    request_timeout: float = 5.0

    model_config = {"env_prefix": "SIGNAGE_PLAYER_"}
