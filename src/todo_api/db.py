from __future__ import annotations

import enum
import logging
import os
from typing import Dict, Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base
from .settings import Settings

logger = logging.getLogger(__name__)

SERVER_MARKER = "Server="

# ADO.NET style keys mapped onto their ODBC equivalents.
_ODBC_KEYS = {
    "server": "SERVER",
    "data source": "SERVER",
    "database": "DATABASE",
    "initial catalog": "DATABASE",
    "user id": "UID",
    "uid": "UID",
    "password": "PWD",
    "pwd": "PWD",
    "trusted_connection": "Trusted_Connection",
    "integrated security": "Trusted_Connection",
    "encrypt": "Encrypt",
    "trustservercertificate": "TrustServerCertificate",
    "multipleactiveresultsets": "MARS_Connection",
    "multisubnetfailover": "MultiSubnetFailover",
    "applicationintent": "ApplicationIntent",
    "application name": "APP",
    "workstation id": "WSID",
}
# ODBC expects yes/no for these, ADO.NET writes true/false (or SSPI).
_ODBC_BOOL_KEYS = {
    "Trusted_Connection",
    "Encrypt",
    "TrustServerCertificate",
    "MARS_Connection",
    "MultiSubnetFailover",
}
_ODBC_BOOL_VALUES = {"true": "yes", "sspi": "yes", "yes": "yes", "false": "no", "no": "no"}
# ADO.NET pooling/provider options with no ODBC keyword.
_ADO_ONLY_KEYS = {
    "driver",
    "persist security info",
    "pooling",
    "min pool size",
    "max pool size",
    "connect timeout",
    "connection timeout",
    "connection lifetime",
    "load balance timeout",
    "enlist",
}
_SQLITE_PATH_KEYS = ("data source", "datasource", "filename")


class DatabaseUnavailableError(SQLAlchemyError):
    """Raised per request when no engine could be built from the connection string."""


class DatabaseProvider(str, enum.Enum):
    EMBEDDED_FILE = "sqlite"
    CLIENT_SERVER = "mssql"


# PUBLIC_INTERFACE
def classify(connection_string: str) -> DatabaseProvider:
    """
    Pick the database provider for a connection string.

    A 'Server=' marker selects the client-server database (SQL Server); anything
    else, typically 'Data Source=<file>', selects the embedded SQLite file.
    """
    if SERVER_MARKER in connection_string:
        return DatabaseProvider.CLIENT_SERVER
    return DatabaseProvider.EMBEDDED_FILE


# PUBLIC_INTERFACE
def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """Split an ADO-style 'Key=Value;Key=Value' string into a dict with lower-cased keys."""
    parts: Dict[str, str] = {}
    for segment in connection_string.split(";"):
        if not segment.strip():
            continue
        key, sep, value = segment.partition("=")
        if not sep:
            raise ValueError(f"Malformed connection string segment: {segment.strip()!r}")
        parts[key.strip().lower()] = value.strip()
    return parts


def sqlite_path(connection_string: str) -> str:
    """Return the database file path named by an embedded connection string."""
    params = parse_connection_string(connection_string)
    for key in _SQLITE_PATH_KEYS:
        if params.get(key):
            return params[key]
    raise ValueError("Embedded connection string has no 'Data Source' entry")


def _odbc_connect(params: Dict[str, str], driver: str) -> str:
    pairs = [f"DRIVER={{{driver}}}"]
    for key, value in params.items():
        if key in _ADO_ONLY_KEYS:
            continue
        odbc_key = _ODBC_KEYS.get(key, key)
        if odbc_key in _ODBC_BOOL_KEYS:
            # Encrypt also takes strict/mandatory/optional, which pass through
            value = _ODBC_BOOL_VALUES.get(value.lower(), value)
        pairs.append(f"{odbc_key}={value}")
    return ";".join(pairs)


# PUBLIC_INTERFACE
def build_url(connection_string: str, provider: DatabaseProvider, odbc_driver: str) -> URL:
    """
    Translate a connection string into a SQLAlchemy URL for the given provider.

    - EMBEDDED_FILE: sqlite:///<Data Source>
    - CLIENT_SERVER: mssql+pyodbc with the keys forwarded through odbc_connect
    """
    if provider is DatabaseProvider.EMBEDDED_FILE:
        return URL.create("sqlite", database=sqlite_path(connection_string))
    params = parse_connection_string(connection_string)
    return URL.create("mssql+pyodbc", query={"odbc_connect": _odbc_connect(params, odbc_driver)})


# PUBLIC_INTERFACE
def create_db_engine(settings: Settings) -> Engine:
    """Classify the configured connection string once and build the engine for it."""
    provider = classify(settings.connection_string)
    url = build_url(settings.connection_string, provider, settings.odbc_driver)
    if provider is DatabaseProvider.CLIENT_SERVER:
        logger.info("Using SQL Server database")
        return create_engine(url, pool_pre_ping=True)
    logger.info("Using SQLite database at %s", url.database)
    if url.database == ":memory:":
        # in-memory databases live on one connection; share it across sessions
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, connect_args={"check_same_thread": False})


# PUBLIC_INTERFACE
def try_create_db_engine(settings: Settings) -> Optional[Engine]:
    """
    Build the engine, or log the failure and return None.

    A malformed connection string or a missing DBAPI driver must not stop the
    process; routes that need the database then answer with a persistence error.
    """
    try:
        return create_db_engine(settings)
    except Exception:
        logger.exception("Database configuration failed")
        return None


# PUBLIC_INTERFACE
def init_db(engine: Engine) -> bool:
    """
    Create the schema if it does not exist yet.

    Failures are logged and reported through the return value; startup continues
    either way and request-time calls surface the underlying error.
    """
    try:
        database = engine.url.database
        if engine.dialect.name == "sqlite" and database and database != ":memory:":
            os.makedirs(os.path.dirname(database) or ".", exist_ok=True)
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Database initialization failed")
        return False
    logger.info("Database initialized successfully")
    return True


def make_session_factory(engine: Optional[Engine]) -> Optional[sessionmaker]:
    if engine is None:
        return None
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield one session per request from the factory held in app state."""
    factory = request.app.state.session_factory
    if factory is None:
        raise DatabaseUnavailableError("No database engine is configured")
    db: Session = factory()
    try:
        yield db
    finally:
        db.close()
