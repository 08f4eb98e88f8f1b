from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "JobMarket"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    # Sliding expiry: every authenticated request pushes the deadline out again.
    session_ttl_seconds: int = 86400
    # Shared read-only credential sent by anonymous clients. It never
    # resolves to a user, so identity-scoped endpoints reject it with 401.
    public_anon_key: str = "public-anon-key"

    # Attempts per repository operation when a concurrent writer bumps a row version.
    write_retries: int = 3

    enforce_status_transitions: bool = True
    reject_duplicate_applications: bool = True
    enable_job_status_changes: bool = False
    enable_application_withdrawal: bool = False

    @property
    def db_path(self) -> Path:
        return self.data_path / "market.sqlite"

    model_config = {"env_prefix": "MARKET_"}


settings = Settings()
