"""
Data Models
===========

Records passed between the stages of a stats generation run.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from statsgen.enums import ManifestVersion


# chain_id -> {"full_match": int, "partial_match": int}
StatsReport = Dict[int, Dict[str, int]]


@dataclass(frozen=True)
class ChainContractCount:
    """Full and partial match counts for one chain, as returned by the datastore."""
    chain_id: int
    full: int
    partial: int


@dataclass(frozen=True)
class Manifest:
    """
    Generation record published next to stats.json.

    ``timestamp`` (epoch milliseconds) and ``date_string`` (its ISO-8601
    rendering) always come from the same captured instant. Versioned copies
    are derived from one base record with :meth:`with_version`.
    """
    timestamp: int
    date_string: str
    version: Optional[ManifestVersion] = None

    def with_version(self, version: ManifestVersion) -> "Manifest":
        return replace(self, version=ManifestVersion(version))

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape: timestamp, dateString, version (when tagged)."""
        data: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "dateString": self.date_string,
        }
        if self.version is not None:
            data["version"] = self.version.value
        return data


@dataclass
class JobResult:
    """Outcome of a successful run."""
    stats: StatsReport
    manifest_v1: Manifest
    manifest_v2: Manifest
    written_files: List[Path] = field(default_factory=list)

    @property
    def chain_count(self) -> int:
        return len(self.stats)
