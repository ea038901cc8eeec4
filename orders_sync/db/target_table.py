from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg2
from psycopg2.extras import execute_values

from orders_sync.models.config_models import DatabaseConfig
from orders_sync.models.store import TargetStoreError

"""Orders Database stored as a PostgreSQL table.

The replace step is DELETE + batched INSERT (psycopg2.extras.execute_values)
inside one explicit transaction, so readers never observe an empty table
after a failed write. A `position` column keeps the written order so that
reads return rows in stored order.
"""

logger = logging.getLogger(__name__)

COLUMNS = ["order_id", "invoice", "order_date", "ship_date", "reseller_po", "last_synced"]

CREATE_SQL = """CREATE TABLE IF NOT EXISTS {table} (
    position integer NOT NULL,
    order_id text NOT NULL,
    invoice text NOT NULL,
    order_date timestamp NULL,
    ship_date timestamp NULL,
    reseller_po text NOT NULL DEFAULT '',
    last_synced text NULL
)"""


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Build the connection string.

    Priority:
        1. DATABASE_URL / PGDSN environment variables (.env is loaded by the CLI)
        2. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. the `database` section of the config file
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_cursor(db_cfg: DatabaseConfig) -> Iterator[Any]:  # pragma: no cover (needs a live server)
    """Yield a cursor on an autocommit connection; the store issues BEGIN/COMMIT itself."""
    try:
        conn = psycopg2.connect(resolve_dsn(db_cfg))
    except psycopg2.Error as e:
        raise TargetStoreError(f"database connection failed: {e}") from e
    conn.autocommit = True
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


class PostgresTargetStore:
    def __init__(self, cursor: Any, table: str, page_size: int = 1000) -> None:
        self.cursor = cursor
        self.table = table
        self.page_size = page_size

    def describe(self) -> str:
        return f"table {self.table}"

    def ensure_table(self) -> None:
        try:
            self.cursor.execute(CREATE_SQL.format(table=self.table))
        except psycopg2.Error as e:
            raise TargetStoreError(f"cannot create {self.describe()}: {e}") from e

    def read_rows(self) -> list[list[Any]]:
        self.ensure_table()
        cols_sql = ",".join(COLUMNS)
        try:
            self.cursor.execute(f"SELECT {cols_sql} FROM {self.table} ORDER BY position")
            return [list(r) for r in self.cursor.fetchall()]
        except psycopg2.Error as e:
            raise TargetStoreError(f"cannot read {self.describe()}: {e}") from e

    def write_rows(self, rows: Sequence[Sequence[Any]]) -> int:
        self.ensure_table()
        values = [(pos, *r) for pos, r in enumerate(rows, start=1)]
        cols_sql = ",".join(["position", *COLUMNS])
        try:
            self.cursor.execute("BEGIN")
            self.cursor.execute(f"DELETE FROM {self.table}")
            if values:
                execute_values(
                    self.cursor,
                    f"INSERT INTO {self.table} ({cols_sql}) VALUES %s",
                    values,
                    page_size=self.page_size,
                )
            self.cursor.execute("COMMIT")
        except psycopg2.Error as e:
            try:
                self.cursor.execute("ROLLBACK")
            except psycopg2.Error:
                logger.warning("rollback failed for %s", self.describe(), exc_info=True)
            raise TargetStoreError(f"cannot write {self.describe()}: {e}") from e
        logger.debug("wrote %d rows to %s", len(values), self.describe())
        return len(values)
