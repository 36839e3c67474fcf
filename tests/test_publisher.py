"""Tests for the repository publisher."""
import json

import pytest

from statsgen.enums import ManifestVersion, Stage
from statsgen.errors import PublishError, SerializationError
from statsgen.manifest import generate_manifest
from statsgen.publisher import (
    MANIFEST_FILENAME,
    STATS_FILENAME,
    RepositoryPublisher,
    render_stats,
    serialize_json,
)


@pytest.fixture
def stats():
    return {
        1: {"full_match": 10, "partial_match": 2},
        137: {"full_match": 5, "partial_match": 0},
    }


@pytest.fixture
def manifests(fixed_clock):
    base = generate_manifest(fixed_clock)
    return base.with_version(ManifestVersion.V1), base.with_version(ManifestVersion.V2)


class TestSerialization:
    """Tests for JSON rendering."""

    def test_two_space_indent_no_trailing_newline(self):
        assert serialize_json({"a": 1, "b": {"c": 2}}) == (
            b'{\n  "a": 1,\n  "b": {\n    "c": 2\n  }\n}'
        )

    def test_stats_sorted_numerically(self):
        data = render_stats({137: {"full_match": 1, "partial_match": 0},
                             2: {"full_match": 1, "partial_match": 0},
                             10: {"full_match": 1, "partial_match": 0}})

        assert list(json.loads(data)) == ["2", "10", "137"]

    def test_empty_stats(self):
        assert render_stats({}) == b"{}"

    def test_unserializable(self):
        with pytest.raises(SerializationError):
            serialize_json({"bad": object()})


class TestRepositoryPublisher:
    """Tests for RepositoryPublisher.publish()."""

    def test_writes_four_files(self, repo_dirs, stats, manifests):
        repo_v1, repo_v2 = repo_dirs
        publisher = RepositoryPublisher(repo_v1, repo_v2)

        written = publisher.publish(stats, *manifests)

        assert [p.name for p in written] == [
            STATS_FILENAME, MANIFEST_FILENAME, STATS_FILENAME, MANIFEST_FILENAME,
        ]
        assert written[0].parent == repo_v1.resolve()
        assert written[2].parent == repo_v2.resolve()

    def test_published_content(self, repo_dirs, stats, manifests):
        repo_v1, repo_v2 = repo_dirs
        RepositoryPublisher(repo_v1, repo_v2).publish(stats, *manifests)

        assert json.loads((repo_v1 / STATS_FILENAME).read_text()) == {
            "1": {"full_match": 10, "partial_match": 2},
            "137": {"full_match": 5, "partial_match": 0},
        }
        assert json.loads((repo_v1 / MANIFEST_FILENAME).read_text()) == {
            "timestamp": 1709744656375,
            "dateString": "2024-03-06T17:04:16.375Z",
            "version": "1",
        }
        assert json.loads((repo_v2 / MANIFEST_FILENAME).read_text())["version"] == "2"

    def test_cross_target_consistency(self, repo_dirs, stats, manifests):
        """Stats are byte-identical; manifests differ only in version."""
        repo_v1, repo_v2 = repo_dirs
        RepositoryPublisher(repo_v1, repo_v2).publish(stats, *manifests)

        assert (repo_v1 / STATS_FILENAME).read_bytes() == (repo_v2 / STATS_FILENAME).read_bytes()

        manifest_v1 = json.loads((repo_v1 / MANIFEST_FILENAME).read_text())
        manifest_v2 = json.loads((repo_v2 / MANIFEST_FILENAME).read_text())
        assert manifest_v1.pop("version") == "1"
        assert manifest_v2.pop("version") == "2"
        assert manifest_v1 == manifest_v2

    def test_idempotent(self, repo_dirs, stats, manifests):
        """Publishing twice leaves the same bytes (no accumulation)."""
        repo_v1, repo_v2 = repo_dirs
        publisher = RepositoryPublisher(repo_v1, repo_v2)
        files = [repo_v1 / STATS_FILENAME, repo_v1 / MANIFEST_FILENAME,
                 repo_v2 / STATS_FILENAME, repo_v2 / MANIFEST_FILENAME]

        publisher.publish(stats, *manifests)
        first = [f.read_bytes() for f in files]
        publisher.publish(stats, *manifests)
        second = [f.read_bytes() for f in files]

        assert first == second

    def test_overwrites_previous_output(self, repo_dirs, stats, manifests):
        repo_v1, repo_v2 = repo_dirs
        (repo_v1 / STATS_FILENAME).write_text('{"999": {"full_match": 1, "partial_match": 1}}')

        RepositoryPublisher(repo_v1, repo_v2).publish(stats, *manifests)

        assert "999" not in json.loads((repo_v1 / STATS_FILENAME).read_text())

    def test_missing_v2_leaves_v1_files(self, temp_dir, stats, manifests):
        """No rollback: v1 output stays when the v2 write fails."""
        repo_v1 = temp_dir / "v1"
        repo_v1.mkdir()
        repo_v2 = temp_dir / "does-not-exist"

        with pytest.raises(PublishError) as exc_info:
            RepositoryPublisher(repo_v1, repo_v2).publish(stats, *manifests)

        assert exc_info.value.stage == Stage.PUBLISH
        assert isinstance(exc_info.value.__cause__, OSError)
        assert (repo_v1 / STATS_FILENAME).exists()
        assert (repo_v1 / MANIFEST_FILENAME).exists()
        assert not repo_v2.exists()

    def test_missing_v1_writes_nothing(self, temp_dir, stats, manifests):
        repo_v2 = temp_dir / "v2"
        repo_v2.mkdir()

        with pytest.raises(PublishError):
            RepositoryPublisher(temp_dir / "missing", repo_v2).publish(stats, *manifests)

        assert list(repo_v2.iterdir()) == []

    def test_wrong_manifest_version(self, repo_dirs, stats, manifests):
        manifest_v1, manifest_v2 = manifests
        repo_v1, repo_v2 = repo_dirs

        with pytest.raises(SerializationError):
            RepositoryPublisher(repo_v1, repo_v2).publish(stats, manifest_v2, manifest_v1)

        assert list(repo_v1.iterdir()) == []
        assert list(repo_v2.iterdir()) == []
