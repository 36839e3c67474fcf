"""
Datastore client for the verification database.

Owns a small psycopg connection pool for the lifetime of one run and
exposes the per-chain aggregation query.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional

import psycopg
from psycopg import Error as PsycopgError
from psycopg_pool import ConnectionPool

from statsgen.errors import DatastoreConnectionError, NotInitializedError, QueryError
from statsgen.log import format_context
from statsgen.models import ChainContractCount

if TYPE_CHECKING:
    from config.config import PostgresConfig

logger = logging.getLogger(__name__)


HEALTH_CHECK_QUERY = "SELECT 1;"

# A contract counts as full when either its creation or runtime match is
# "perfect". The partial predicate is kept exactly as deployed: a contract
# whose creation match is not perfect and whose runtime_match is NULL
# falls into neither bucket.
COUNT_CONTRACTS_PER_CHAIN_QUERY = """
    SELECT
      contract_deployments.chain_id AS chain_id,
      CAST(SUM(CASE
        WHEN COALESCE(sourcify_matches.creation_match, '') = 'perfect' OR sourcify_matches.runtime_match = 'perfect' THEN 1 ELSE 0 END) AS INTEGER) AS full,
      CAST(SUM(CASE
        WHEN COALESCE(sourcify_matches.creation_match, '') != 'perfect' AND sourcify_matches.runtime_match != 'perfect' THEN 1 ELSE 0 END) AS INTEGER) AS partial
    FROM sourcify_matches
    JOIN verified_contracts ON verified_contracts.id = sourcify_matches.verified_contract_id
    JOIN contract_deployments ON contract_deployments.id = verified_contracts.deployment_id
    GROUP BY contract_deployments.chain_id;
"""


class DatastoreClient:
    """
    Pooled access to the verification database.

    Lifecycle:
    1. initialize() runs a health check, then opens the pool (idempotent)
    2. count_contracts_per_chain() runs the aggregation query
    3. close() releases the pool (safe to call at any time, idempotent)

    Prefer :meth:`connected` or ``with DatastoreClient(cfg) as client`` so the
    pool is released on every exit path.
    """

    def __init__(
        self,
        config: "PostgresConfig",
        pool_factory: Callable[..., Any] = ConnectionPool,
        connect: Callable[..., Any] = psycopg.connect,
    ):
        """
        Args:
            config: PostgreSQL connection settings
            pool_factory: Callable building the pool (psycopg_pool.ConnectionPool
                signature). Injected in tests.
            connect: Opens the single health check connection
                (psycopg.connect signature). Injected in tests.
        """
        self.config = config
        self._pool_factory = pool_factory
        self._connect = connect
        self._pool: Optional[Any] = None

    @classmethod
    @contextmanager
    def connected(
        cls,
        config: "PostgresConfig",
        pool_factory: Callable[..., Any] = ConnectionPool,
        connect: Callable[..., Any] = psycopg.connect,
    ) -> Iterator["DatastoreClient"]:
        """Yield an initialized client and close it on exit."""
        client = cls(config, pool_factory=pool_factory, connect=connect)
        client.initialize()
        try:
            yield client
        finally:
            client.close()

    def __enter__(self) -> "DatastoreClient":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    def initialize(self) -> bool:
        """
        Verify the database answers, then open the connection pool.

        The health check runs on one connection opened directly, so an
        unreachable database fails on the first attempt. The pool is only
        built once the database has answered.

        Returns:
            True once the pool is ready

        Raises:
            DatastoreConnectionError: If the health check fails or the pool
                cannot be opened. A partially opened pool is closed first.
        """
        if self._pool is not None:
            return True

        logger.debug("[DatastoreClient] Checking database health")
        try:
            with self._connect(**self.config.connection_kwargs()) as conn:
                conn.execute(HEALTH_CHECK_QUERY)
        except Exception as e:
            raise DatastoreConnectionError("Cannot connect") from e

        logger.debug("[DatastoreClient] Initializing database pool")
        pool = self._pool_factory(
            conninfo="",
            kwargs=self.config.connection_kwargs(),
            min_size=1,
            max_size=self.config.pool_size,
            timeout=self.config.connect_timeout,
            name="statsgen",
            reconnect_timeout=self.config.connect_timeout,
            open=False,
        )

        try:
            # Wait for the first pooled connection instead of letting
            # background workers keep reconnecting
            pool.open(wait=True, timeout=self.config.connect_timeout)
        except Exception as e:
            pool.close()
            raise DatastoreConnectionError("Cannot connect") from e

        self._pool = pool
        logger.info(
            "[DatastoreClient] Database initialized"
            + format_context(**self.config.describe())
        )
        return True

    def count_contracts_per_chain(self) -> List[ChainContractCount]:
        """
        Count full and partial matches for every chain with verified contracts.

        Returns:
            One ChainContractCount per chain that has at least one match row

        Raises:
            NotInitializedError: If initialize() has not succeeded
            QueryError: If the database rejects the query
        """
        if self._pool is None:
            raise NotInitializedError("Database pool is not initialized")

        try:
            with self._pool.connection() as conn:
                rows = conn.execute(COUNT_CONTRACTS_PER_CHAIN_QUERY).fetchall()
        except PsycopgError as e:
            raise QueryError(f"Aggregation query failed: {e}") from e

        logger.debug(f"[DatastoreClient] Aggregation query returned {len(rows)} row(s)")
        return [
            ChainContractCount(chain_id=int(chain_id), full=int(full), partial=int(partial))
            for chain_id, full, partial in rows
        ]

    def close(self) -> None:
        """Release the pool. No-op if never initialized."""
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        pool.close()
        logger.debug("[DatastoreClient] Database pool closed")
