"""Signage Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Signage Server"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # Paths
    data_dir: Path = Path.home() / "signage" / "data"

    # Database
    db_path: Path = Path.home() / "signage" / "data" / "signage.db"

    # JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # Initial admin, created on startup when both are set
    bootstrap_admin_email: str = ""
    bootstrap_admin_password: str = ""

    # Display lifecycle
    offline_after_hours: float = 2.0
    registration_max_retries: int = 5
    rejected_display_retention_days: int = 30  # 0 disables cleanup

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    model_config = {"env_prefix": "SIGNAGE_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret once and keep it in the data dir."""
        if self.jwt_secret:
            return
        secret_file = self.data_dir / ".jwt_secret"
        if secret_file.exists():
            self.jwt_secret = secret_file.read_text().strip()
        if not self.jwt_secret:
            self.jwt_secret = secrets.token_urlsafe(32)
            secret_file.write_text(self.jwt_secret)
            secret_file.chmod(0o600)


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
