"""
SQL Server Connection Configuration.

Provides configuration for the target SQL Server instance the FRK jobs are
deployed to. One deployment targets exactly one instance; roll out to more
instances by running the deployment once per target.

Authentication:
    - Windows/Integrated (default): no FRK_SQL_USER set, Trusted_Connection=yes
    - SQL login: FRK_SQL_USER + FRK_SQL_PASSWORD

Exports:
    SqlServerConfig: Connection settings and ODBC connection string builder
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from exceptions import ConfigurationError

from .defaults import SqlServerDefaults


def _odbc_value(value: str) -> str:
    """Brace-quote an ODBC attribute value when it contains special characters."""
    if any(ch in value for ch in ";{}=") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


class SqlServerConfig(BaseModel):
    """
    SQL Server connection settings for pyodbc.
    """

    server: str = Field(
        default=SqlServerDefaults.SERVER,
        description="SQL Server instance (host, host\\instance or host,port)",
        examples=["sqlprod01", "sqlprod01\\INST2", "10.0.0.5,1433"]
    )

    driver: str = Field(
        default=SqlServerDefaults.DRIVER,
        description="Installed ODBC driver name"
    )

    user: Optional[str] = Field(
        default=None,
        description="SQL login for password authentication. When unset, integrated security is used."
    )

    password: Optional[str] = Field(
        default=None,
        repr=False,
        description="Password for the SQL login"
    )

    trust_server_certificate: bool = Field(
        default=SqlServerDefaults.TRUST_SERVER_CERTIFICATE,
        description="Accept self-signed server certificates (ODBC Driver 18 encrypts by default)"
    )

    connection_timeout_seconds: int = Field(
        default=SqlServerDefaults.CONNECTION_TIMEOUT_SECONDS,
        ge=1,
        description="Login timeout in seconds"
    )

    @property
    def uses_integrated_security(self) -> bool:
        return not self.user

    def connection_string(self, database: str = "msdb") -> str:
        """
        Build the ODBC connection string for a database on this instance.

        Args:
            database: Initial catalog (msdb for job management)
        """
        parts = [
            f"DRIVER={{{self.driver}}}",
            f"SERVER={_odbc_value(self.server)}",
            f"DATABASE={_odbc_value(database)}",
        ]
        if self.uses_integrated_security:
            parts.append("Trusted_Connection=yes")
        else:
            parts.append(f"UID={_odbc_value(self.user)}")
            if self.password:
                parts.append(f"PWD={_odbc_value(self.password)}")
        if self.trust_server_certificate:
            parts.append("TrustServerCertificate=yes")
        parts.append(f"Connection Timeout={self.connection_timeout_seconds}")
        return ";".join(parts) + ";"

    def debug_dict(self) -> dict:
        """Debug output with masked password."""
        return {
            "server": self.server,
            "driver": self.driver,
            "user": self.user,
            "password": "***MASKED***" if self.password else None,
            "integrated_security": self.uses_integrated_security,
            "trust_server_certificate": self.trust_server_certificate,
            "connection_timeout_seconds": self.connection_timeout_seconds,
        }

    @classmethod
    def from_environment(cls) -> "SqlServerConfig":
        """Load from FRK_SQL_* environment variables."""
        timeout = os.environ.get("FRK_SQL_TIMEOUT", str(SqlServerDefaults.CONNECTION_TIMEOUT_SECONDS))
        try:
            timeout_seconds = int(timeout)
        except ValueError:
            raise ConfigurationError(f"FRK_SQL_TIMEOUT must be an integer (got {timeout!r})") from None
        return cls(
            server=os.environ.get("FRK_SQL_SERVER", SqlServerDefaults.SERVER),
            driver=os.environ.get("FRK_SQL_DRIVER", SqlServerDefaults.DRIVER),
            user=os.environ.get("FRK_SQL_USER") or None,
            password=os.environ.get("FRK_SQL_PASSWORD") or None,
            trust_server_certificate=os.environ.get("FRK_SQL_TRUST_CERT", "false").lower() in ("true", "1", "yes"),
            connection_timeout_seconds=timeout_seconds,
        )
