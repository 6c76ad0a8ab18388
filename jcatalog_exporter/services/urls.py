"""Connection URL handling: SQLAlchemy URLs and JDBC-style URLs."""

import logging
import re
from typing import Optional

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from ..exceptions import ConnectionFailure

logger = logging.getLogger(__name__)

JDBC_PREFIX = "jdbc:"
DEFAULT_MSSQL_ODBC_DRIVER = "ODBC Driver 17 for SQL Server"

# JDBC subprotocol -> SQLAlchemy dialect+driver
JDBC_DIALECTS = {
    "postgresql": "postgresql",
    "mysql": "mysql+pymysql",
    "mariadb": "mysql+pymysql",
    "sqlserver": "mssql+pyodbc",
    "oracle": "oracle+oracledb",
    "sqlite": "sqlite",
}

UNSUPPORTED_JDBC = ("h2",)

_ORACLE_SERVICE = re.compile(r"^thin:@//(?P<host>[^:/]+)(?::(?P<port>\d+))?/(?P<service>.+)$")
_ORACLE_SID = re.compile(r"^thin:@(?P<host>[^:/]+)(?::(?P<port>\d+))?:(?P<sid>.+)$")


def _translate_sqlserver(rest: str) -> str:
    """``//host:port;databaseName=db;k=v`` -> ``mssql+pyodbc://host:port/db?driver=...``."""
    host_part, _, params = rest.partition(";")
    properties = {}
    for item in params.split(";"):
        if "=" in item:
            key, value = item.split("=", 1)
            properties[key.strip().lower()] = value.strip()
    database = properties.get("databasename") or properties.get("database") or ""
    driver = DEFAULT_MSSQL_ODBC_DRIVER.replace(" ", "+")
    return f"{JDBC_DIALECTS['sqlserver']}:{host_part}/{database}?driver={driver}"


def _translate_oracle(rest: str) -> str:
    match = _ORACLE_SERVICE.match(rest)
    if match:
        port = f":{match.group('port')}" if match.group("port") else ""
        return f"{JDBC_DIALECTS['oracle']}://{match.group('host')}{port}/?service_name={match.group('service')}"
    match = _ORACLE_SID.match(rest)
    if match:
        port = f":{match.group('port')}" if match.group("port") else ""
        return f"{JDBC_DIALECTS['oracle']}://{match.group('host')}{port}/{match.group('sid')}"
    raise ConnectionFailure(f"Unrecognized Oracle JDBC URL: jdbc:oracle:{rest}")


def translate_jdbc_url(jdbc_url: str) -> str:
    """Translate a JDBC connection URL into a SQLAlchemy URL string."""
    body = jdbc_url[len(JDBC_PREFIX):]
    subprotocol, _, rest = body.partition(":")
    subprotocol = subprotocol.lower()

    if subprotocol in UNSUPPORTED_JDBC:
        raise ConnectionFailure(f"Unsupported database for URL: {jdbc_url}")
    if subprotocol == "sqlserver":
        return _translate_sqlserver(rest)
    if subprotocol == "oracle":
        return _translate_oracle(rest)
    if subprotocol == "sqlite":
        if rest.startswith("//"):
            return f"sqlite:{rest}"
        if rest in ("", ":memory:"):
            return "sqlite://"
        return f"sqlite:///{rest}"
    if subprotocol in JDBC_DIALECTS:
        return f"{JDBC_DIALECTS[subprotocol]}:{rest}"

    logger.warning(f"Unknown JDBC driver for URL: {jdbc_url}, attempting to continue anyway")
    return body


def build_connection_url(url: str, username: Optional[str] = None,
                         password: Optional[str] = None) -> URL:
    """Parse a SQLAlchemy or JDBC URL, overriding credentials when given."""
    if url.lower().startswith(JDBC_PREFIX):
        url = translate_jdbc_url(url)

    try:
        parsed = make_url(url)
    except ArgumentError as e:
        raise ConnectionFailure(f"Invalid connection URL: {url}") from e

    if username:
        parsed = parsed.set(username=username)
    if password:
        parsed = parsed.set(password=password)
    return parsed
