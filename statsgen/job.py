"""Stats generation job - sequences query, transform and publish."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Type

from statsgen.aggregator import generate_stats
from statsgen.database import DatastoreClient
from statsgen.enums import ManifestVersion, Stage
from statsgen.errors import (
    DatastoreConnectionError,
    PublishError,
    QueryError,
    SerializationError,
    StatsGenError,
)
from statsgen.log import format_context
from statsgen.manifest import Clock, generate_manifest
from statsgen.models import ChainContractCount, JobResult
from statsgen.publisher import RepositoryPublisher

if TYPE_CHECKING:
    from config.config import StatsGenConfig

logger = logging.getLogger(__name__)


class StatsGenJob:
    """
    Computes verification stats and publishes them to both repositories.

    Workflow:
    1. Init: open the database pool (health-checked)
    2. Count: aggregate full/partial matches per chain in the database
    3. Aggregate: reshape counts into the stats.json layout
    4. Manifest: capture the generation time once, tag copies "1" and "2"
    5. Publish: write stats.json and manifest.json into both repositories
    6. Close: release the pool, on success and on failure alike

    Any stage failure is logged with the stage inputs and re-raised as the
    stage's error kind. Nothing is retried and no later stage runs.
    """

    def __init__(
        self,
        config: "StatsGenConfig",
        client: Optional[DatastoreClient] = None,
        publisher: Optional[RepositoryPublisher] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            config: Validated configuration
            client: Datastore client (built from config.postgres if None)
            publisher: Repository publisher (built from config.repositories if None)
            clock: Epoch-milliseconds clock for the manifest (wall clock if None)
        """
        self.config = config
        self.client = client or DatastoreClient(config.postgres)
        self.publisher = publisher or RepositoryPublisher(
            config.repositories.v1_path,
            config.repositories.v2_path,
        )
        self.clock = clock

        logger.debug(
            "[StatsGenJob] Initialized"
            + format_context(
                repo_v1=config.repositories.v1_path,
                repo_v2=config.repositories.v2_path,
            )
        )

    @contextmanager
    def _stage(
        self,
        stage: Stage,
        error_cls: Type[StatsGenError],
        message: str,
        **context: Any,
    ) -> Iterator[None]:
        """
        Log a failing stage with its inputs and re-raise it.

        StatsGenError subclasses keep their kind; any other exception is
        wrapped in error_cls tagged with this stage.
        """
        try:
            yield
        except Exception as e:
            logger.error(
                f"[StatsGenJob] {message}" + format_context(stage=stage, **context),
                exc_info=e,
            )
            if isinstance(e, StatsGenError):
                raise
            raise error_cls(message, stage=stage) from e

    def run(self) -> JobResult:
        """
        Execute one full run.

        Returns:
            JobResult describing what was published

        Raises:
            StatsGenError: Stage-tagged failure (connection, query,
                serialization, publish or close)
        """
        with self._stage(
            Stage.INIT,
            DatastoreConnectionError,
            "Cannot connect",
            **self.config.postgres.describe(),
        ):
            self.client.initialize()

        try:
            result = self._generate_and_publish()
        except BaseException:
            self._close(suppress_errors=True)
            raise
        self._close(suppress_errors=False)
        return result

    def _close(self, suppress_errors: bool) -> None:
        """Release the pool. With suppress_errors, a close failure is only logged."""
        logger.debug("[StatsGenJob] Closing database pool")
        try:
            with self._stage(
                Stage.CLOSE,
                DatastoreConnectionError,
                "Error while closing database pool",
            ):
                self.client.close()
        except StatsGenError:
            # An earlier stage error is already propagating and takes precedence
            if not suppress_errors:
                raise

    def _generate_and_publish(self) -> JobResult:
        logger.info("[StatsGenJob] Count contracts in each chain")
        contracts_per_chain: List[ChainContractCount]
        with self._stage(Stage.COUNT, QueryError, "Error while querying database"):
            contracts_per_chain = self.client.count_contracts_per_chain()
        logger.info(f"[StatsGenJob] Count completed ({len(contracts_per_chain)} chains)")

        rows = [asdict(chain) for chain in contracts_per_chain]

        logger.info("[StatsGenJob] Formatting results in stats.json")
        with self._stage(
            Stage.AGGREGATE,
            SerializationError,
            "Error while generating stats",
            contracts_per_chain=rows,
        ):
            stats = generate_stats(contracts_per_chain)

        logger.info("[StatsGenJob] Formatting results in manifest.json")
        with self._stage(
            Stage.MANIFEST,
            SerializationError,
            "Error while generating manifest",
            contracts_per_chain=rows,
        ):
            manifest = generate_manifest(self.clock)
            manifest_v1 = manifest.with_version(ManifestVersion.V1)
            manifest_v2 = manifest.with_version(ManifestVersion.V2)

        logger.info("[StatsGenJob] Storing files")
        with self._stage(
            Stage.PUBLISH,
            PublishError,
            "Error while storing files in repo",
            stats=stats,
            manifest_v1=manifest_v1.to_dict(),
            manifest_v2=manifest_v2.to_dict(),
        ):
            written = self.publisher.publish(stats, manifest_v1, manifest_v2)

        return JobResult(
            stats=stats,
            manifest_v1=manifest_v1,
            manifest_v2=manifest_v2,
            written_files=written,
        )
