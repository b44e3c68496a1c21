"""Application configuration with environment variable support.

All settings can be overridden via environment variables prefixed with
``FEATUREBOARD_``, or via a ``.env`` file in the project root.

Examples::

    FEATUREBOARD_PORT=9000 featureboard start
    FEATUREBOARD_SECRET_KEY=... featureboard start
    FEATUREBOARD_ADMIN_EMAILS='["ops@example.com"]' featureboard start
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root: two levels up from this file (backend/app/config.py -> featureboard/)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent

# HS256 wants at least 32 bytes of key material
DEFAULT_SECRET_KEY = "featureboard-dev-secret-change-me-before-deploying"


class Settings(BaseSettings):
    """Featureboard configuration — all values overridable via env vars."""

    model_config = SettingsConfigDict(
        env_prefix="FEATUREBOARD_",
        env_file=str(_BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Paths
    data_dir: Path = _BASE_DIR / "data"

    # Logging
    log_level: str = "INFO"

    # Auth
    secret_key: str = DEFAULT_SECRET_KEY
    token_ttl_days: int = 30
    cookie_name: str = "token"
    cookie_secure: bool = False
    bcrypt_rounds: int = 12
    # Accounts registered with one of these emails get the admin role
    admin_emails: list[str] = []

    @property
    def db_path(self) -> Path:
        return self.data_dir / "featureboard.db"

    @property
    def database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.db_path}"


# Singleton instance — import this everywhere
settings = Settings()

DATA_DIR = settings.data_dir
DATABASE_URL = settings.database_url
