from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Sequence, Tuple

DEFAULT_CONNECTION_STRING = "Data Source=data/app.db"
# Insecure placeholder; override JWT_KEY for anything beyond local demos.
DEFAULT_JWT_KEY = "development_secret_change_me_minimum_32_characters"
DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


@dataclass(frozen=True)
class Settings:
    """
    Application settings, built once at startup and passed to create_app().

    Env vars:
    - CONNECTION_STRING: database connection string (aliases: ConnectionStrings__Default,
      ConnectionStrings_Default). Default 'Data Source=data/app.db'
    - JWT_KEY: symmetric signing key for bearer tokens (alias: Jwt__Key)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; local dev servers by default
    - MSSQL_ODBC_DRIVER: ODBC driver used when the connection string targets SQL Server
    - LOG_LEVEL: root log level (default INFO)
    """

    connection_string: str = DEFAULT_CONNECTION_STRING
    jwt_key: str = DEFAULT_JWT_KEY
    cors_allow_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS
    odbc_driver: str = DEFAULT_ODBC_DRIVER
    log_level: str = "INFO"
    jwt_algorithm: str = "HS256"
    token_lifetime: timedelta = timedelta(hours=1)
    clock_skew: timedelta = timedelta(minutes=2)

    @property
    def uses_default_jwt_key(self) -> bool:
        return self.jwt_key == DEFAULT_JWT_KEY


def _get_env(names: Sequence[str], default: str) -> str:
    """Return the first non-empty value among the given env var names."""
    for name in names:
        value: Optional[str] = os.getenv(name)
        if value is not None and value.strip() != "":
            return value.strip()
    return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    connection_string = _get_env(
        ("CONNECTION_STRING", "ConnectionStrings__Default", "ConnectionStrings_Default"),
        DEFAULT_CONNECTION_STRING,
    )
    jwt_key = _get_env(("JWT_KEY", "Jwt__Key"), DEFAULT_JWT_KEY)
    origins = _parse_origins(_get_env(("CORS_ALLOW_ORIGINS",), ",".join(DEFAULT_CORS_ORIGINS)))
    odbc_driver = _get_env(("MSSQL_ODBC_DRIVER",), DEFAULT_ODBC_DRIVER)
    log_level = _get_env(("LOG_LEVEL",), "INFO").upper()

    return Settings(
        connection_string=connection_string,
        jwt_key=jwt_key,
        cors_allow_origins=tuple(origins),
        odbc_driver=odbc_driver,
        log_level=log_level,
    )
