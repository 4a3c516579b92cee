"""Connection probes that gather table metadata for the dashboard."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Protocol, runtime_checkable
from urllib.parse import quote

import asyncpg

from .models import ConnectionParameters, IntrospectionResult, ProbeFailure, ProbeSuccess

LOG = logging.getLogger(__name__)


class ProbeError(RuntimeError):
    """Raised when a probe cannot complete."""


class ConnectionProbeError(ProbeError):
    """Raised when the connection cannot be opened or verified."""


class IntrospectionError(ProbeError):
    """Raised when listing tables or counting rows fails."""


@runtime_checkable
class ConnectionProbe(Protocol):
    """Protocol implemented by probes. Calls block until the probe finishes."""

    def probe(self, params: ConnectionParameters) -> IntrospectionResult:
        """Connect, verify liveness and collect table row counts."""


def build_dsn(params: ConnectionParameters) -> str:
    """Compose a ``postgresql://`` URI, omitting empty components."""

    credentials = ""
    if params.user:
        credentials = quote(params.user, safe="")
        if params.password:
            credentials += ":" + quote(params.password, safe="")
        credentials += "@"
    elif params.password:
        credentials = ":" + quote(params.password, safe="") + "@"
    location = quote(params.host, safe="") if params.host else ""
    if params.port:
        location += ":" + quote(params.port, safe="")
    path = "/" + quote(params.database, safe="") if params.database else ""
    return f"postgresql://{credentials}{location}{path}"


def quote_ident(name: str) -> str:
    """Quote a PostgreSQL identifier."""

    return '"' + name.replace('"', '""') + '"'


class AsyncpgProbe:
    """Probe that talks to PostgreSQL via asyncpg on a private event loop."""

    _PING_QUERY = "SELECT 1"

    _TABLES_QUERY = """
        SELECT table_name
        FROM information_schema.tables
        WHERE table_schema = $1 AND table_type = 'BASE TABLE'
        ORDER BY table_name
    """

    def __init__(self, *, schema: str = "public", connect_timeout: float = 60.0) -> None:
        self._schema = schema
        self._connect_timeout = connect_timeout

    def probe(self, params: ConnectionParameters) -> IntrospectionResult:
        try:
            tables, counts = asyncio.run(self._introspect(params))
        except ProbeError as exc:
            LOG.warning("Probe failed", extra={"host": params.host, "database": params.database})
            return ProbeFailure(str(exc))
        return ProbeSuccess(tables=tables, row_counts=counts)

    async def _introspect(self, params: ConnectionParameters) -> tuple[tuple[str, ...], dict[str, int]]:
        conn = await self._connect(params)
        try:
            try:
                await conn.fetchval(self._PING_QUERY)
            except Exception as exc:
                raise ConnectionProbeError(f"could not ping the database: {exc}") from exc
            tables = await self._fetch_tables(conn)
            counts: dict[str, int] = {}
            for table in tables:
                counts[table] = await self._fetch_row_count(conn, table)
        finally:
            try:
                await conn.close()
            except Exception:  # pragma: no cover - best effort
                LOG.debug("Failed to close connection", exc_info=True)
        return tables, counts

    async def _connect(self, params: ConnectionParameters):
        try:
            return await asyncpg.connect(dsn=build_dsn(params), timeout=self._connect_timeout)
        except Exception as exc:
            raise ConnectionProbeError(f"failed to connect to the database: {exc}") from exc

    async def _fetch_tables(self, conn) -> tuple[str, ...]:
        try:
            rows = await conn.fetch(self._TABLES_QUERY, self._schema)
        except Exception as exc:
            raise IntrospectionError(f"Failed to load tables: {exc}") from exc
        return tuple(str(row["table_name"]) for row in rows)

    async def _fetch_row_count(self, conn, table: str) -> int:
        query = f"SELECT COUNT(*) FROM {quote_ident(self._schema)}.{quote_ident(table)}"
        try:
            value = await conn.fetchval(query)
        except Exception as exc:
            raise IntrospectionError(f"Failed to fetch row count for table {table}: {exc}") from exc
        return int(value)


class StaticProbe:
    """Stub probe returning a canned result; records every request."""

    def __init__(
        self,
        tables: Mapping[str, int] | None = None,
        *,
        failure: str | None = None,
    ) -> None:
        self._counts = dict(tables or {})
        self._failure = failure
        self.requests: list[ConnectionParameters] = []

    def probe(self, params: ConnectionParameters) -> IntrospectionResult:
        self.requests.append(params)
        if self._failure is not None:
            return ProbeFailure(self._failure)
        return ProbeSuccess(tables=tuple(self._counts), row_counts=dict(self._counts))


__all__ = [
    "AsyncpgProbe",
    "ConnectionProbe",
    "ConnectionProbeError",
    "IntrospectionError",
    "ProbeError",
    "StaticProbe",
    "build_dsn",
    "quote_ident",
]
