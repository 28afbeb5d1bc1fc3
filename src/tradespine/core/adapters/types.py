"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import unquote, urlsplit

from tradespine.core.errors import ConfigError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    ORACLE = "oracle"


_DEFAULT_PORTS = {
    DatabaseType.POSTGRESQL: 5432,
    DatabaseType.ORACLE: 1521,
}


@dataclass
class DatabaseConfig:
    """
    Configuration for a database connection.

    Different fields are used by different database types.
    """

    # Common
    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # PostgreSQL / Oracle
    host: str = "localhost"
    port: int = 5432
    database: str = ""
    username: str | None = None
    password: str | None = None

    # Connection pool
    pool_size: int = 5

    # Options
    connect_timeout: int = 10
    readonly: bool = False

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def to_connection_string(self) -> str:
        """Generate connection string for the database type (password masked)."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return self.path or ":memory:"
            case DatabaseType.POSTGRESQL | DatabaseType.ORACLE:
                user = self.username or ""
                secret = ":***" if self.password else ""
                return f"{self.db_type.value}://{user}{secret}@{self.host}:{self.port}/{self.database}"
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")

    @classmethod
    def from_url(cls, url: str) -> DatabaseConfig:
        """Parse ``sqlite:///path``, ``postgresql://u:p@h:port/db`` or
        ``oracle://u:p@h:port/service``."""
        scheme, sep, rest = url.partition("://")
        if not sep:
            raise ConfigError(f"Invalid database URL: {url!r}")
        scheme = scheme.lower()
        if scheme == "postgres":
            scheme = "postgresql"
        try:
            db_type = DatabaseType(scheme)
        except ValueError:
            raise ConfigError(f"Unsupported database scheme: {scheme!r}") from None

        if db_type is DatabaseType.SQLITE:
            # sqlite:///relative.db, sqlite:////abs/path.db, sqlite:///:memory:
            path = rest[1:] if rest.startswith("/") else rest
            return cls(db_type=db_type, path=path or ":memory:")

        parts = urlsplit(url)
        return cls(
            db_type=db_type,
            host=parts.hostname or "localhost",
            port=parts.port or _DEFAULT_PORTS[db_type],
            database=parts.path.lstrip("/"),
            username=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password else None,
        )


__all__ = [
    "DatabaseConfig",
    "DatabaseType",
]
