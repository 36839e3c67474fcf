"""
Repository publisher - writes stats.json and manifest.json into both
output repositories.
"""
import json
import logging
from pathlib import Path
from typing import Any, Callable, List, Union

from statsgen.enums import ManifestVersion, Stage
from statsgen.errors import PublishError, SerializationError
from statsgen.models import Manifest, StatsReport
from storage.base import LocalStorage, StorageBackend

logger = logging.getLogger(__name__)


STATS_FILENAME = "stats.json"
MANIFEST_FILENAME = "manifest.json"


def serialize_json(obj: Any) -> bytes:
    """
    Pretty-print ``obj`` as UTF-8 JSON with 2-space indentation.

    Output matches JSON.stringify(obj, null, 2): no trailing newline, keys
    in the order given.

    Raises:
        SerializationError: If obj is not JSON serializable
    """
    try:
        return json.dumps(obj, indent=2, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize to JSON: {e}", stage=Stage.PUBLISH) from e


def render_stats(stats: StatsReport) -> bytes:
    """Serialize stats with chain ids in ascending numeric order."""
    return serialize_json({chain_id: stats[chain_id] for chain_id in sorted(stats)})


def render_manifest(manifest: Manifest) -> bytes:
    return serialize_json(manifest.to_dict())


class RepositoryPublisher:
    """
    Publishes one stats snapshot into the v1 and v2 repositories.

    Files are written in a fixed order (v1 stats, v1 manifest, v2 stats,
    v2 manifest). There is no rollback: if a write fails, files already
    written by this run stay on disk and the next run overwrites them.
    """

    def __init__(
        self,
        repo_v1_path: Union[str, Path],
        repo_v2_path: Union[str, Path],
        storage_factory: Callable[..., StorageBackend] = LocalStorage,
    ):
        """
        Args:
            repo_v1_path: Root of the version 1 repository (must exist)
            repo_v2_path: Root of the version 2 repository (must exist)
            storage_factory: Builds a storage backend for a repository root
        """
        self.repo_v1_path = Path(repo_v1_path)
        self.repo_v2_path = Path(repo_v2_path)
        self.targets = {
            ManifestVersion.V1: storage_factory(self.repo_v1_path, create_base_dir=False),
            ManifestVersion.V2: storage_factory(self.repo_v2_path, create_base_dir=False),
        }

    def publish(
        self,
        stats: StatsReport,
        manifest_v1: Manifest,
        manifest_v2: Manifest,
    ) -> List[Path]:
        """
        Write stats and manifests to both repositories.

        Args:
            stats: Stats report, written identically to both repositories
            manifest_v1: Manifest tagged with version "1"
            manifest_v2: Manifest tagged with version "2"

        Returns:
            Paths of the four written files, in write order

        Raises:
            SerializationError: If a manifest carries the wrong version or
                the content cannot be encoded
            PublishError: If a file cannot be written
        """
        manifests = {ManifestVersion.V1: manifest_v1, ManifestVersion.V2: manifest_v2}
        for version, manifest in manifests.items():
            if manifest.version != version:
                raise SerializationError(
                    f"Manifest for repository v{version} is tagged {manifest.version}",
                    stage=Stage.PUBLISH,
                )

        # Encode everything up front so an encoding error writes nothing
        stats_bytes = render_stats(stats)
        manifest_bytes = {version: render_manifest(m) for version, m in manifests.items()}

        written: List[Path] = []
        for version, storage in self.targets.items():
            for filename, data in (
                (STATS_FILENAME, stats_bytes),
                (MANIFEST_FILENAME, manifest_bytes[version]),
            ):
                try:
                    path = storage.write_bytes(data, filename)
                except OSError as e:
                    raise PublishError(
                        f"Cannot write {storage.get_full_path(filename)}: {e}"
                    ) from e
                written.append(Path(path))
                logger.debug(f"[RepositoryPublisher] Stored {path}")

        logger.info(f"[RepositoryPublisher] Published {len(written)} files")
        return written
