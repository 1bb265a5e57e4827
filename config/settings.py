"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = "Free as in Freedom"        # HMAC secret for auth tokens
    token_ttl_seconds: int = 3600                  # 1 hour
    claims_utc_offset_hours: int = 8               # timezone used when rendering token expiry

    # ── Password Policy ──────────────────────────────────────────────────
    password_cost: int = 12                        # bcrypt work factor (4..31)
    password_salt_mode: str = "random"             # "random" | "fixed"
    password_fixed_salt: str = "00" * 16           # 16 bytes, hex; only read in fixed mode

    # ── Database ─────────────────────────────────────────────────────────
    database_url: Optional[str] = None             # overrides the parts below when set
    database_driver: str = "postgresql+asyncpg"
    database_user: str = "apb"
    database_password: str = ""
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "apb_database"

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 3000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    def get_database_url(self) -> str:
        """Return ``database_url`` or assemble one from the individual parts."""
        if self.database_url:
            return self.database_url
        return (
            f"{self.database_driver}://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )


config = Settings()
