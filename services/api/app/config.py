"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── TiDB (MySQL-protocol compatible) ───────────────────────────────────
    tidb_host: str = "tidb"
    tidb_port: int = 4000
    tidb_user: str = "root"
    tidb_password: str = ""
    tidb_database: str = "stellar"
    tidb_pool_size: int = 20
    tidb_max_overflow: int = 10
    tidb_pool_recycle: int = 1800         # seconds

    @property
    def tidb_url(self) -> str:
        return (
            f"mysql+aiomysql://{self.tidb_user}:{self.tidb_password}"
            f"@{self.tidb_host}:{self.tidb_port}/{self.tidb_database}"
        )

    # ── Like rankings ──────────────────────────────────────────────────────
    # Calendar windows (week / month / year) are cut in this civil timezone.
    ranking_timezone: str = "Asia/Seoul"
    ranking_default_limit: int = 20
    ranking_max_limit: int = 100          # larger limits are clamped, not rejected
    # At or below this many systems the random ranking samples every row
    # independently; above it a single random offset window is read instead.
    # This is also the most ids a random ranking request ever reads.
    ranking_random_shuffle_threshold: int = 1000
    # is_liked for anonymous callers: "false" fills False, "omit" drops the field
    ranking_anonymous_liked: Literal["false", "omit"] = "false"

    # ── Observability ──────────────────────────────────────────────────────
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "stellar-likes-api"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
