"""
Pytest configuration and fixtures for all tests.
"""
from contextlib import contextmanager

import pytest

from config import load_config
from statsgen.database import DatastoreClient
from statsgen.models import ChainContractCount


# 2024-03-06T17:04:16.375Z
FIXED_TIMESTAMP = 1709744656375


class FakeCursor:
    def __init__(self, rows):
        self._rows = rows

    def fetchall(self):
        return list(self._rows)


class FakeConnection:
    """Stands in for psycopg.Connection; records executed statements."""

    def __init__(self, factory):
        self.factory = factory
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def execute(self, query):
        self.factory.queries.append(query)
        if query.strip() == "SELECT 1;":
            if self.factory.health_error is not None:
                raise self.factory.health_error
            return FakeCursor([(1,)])
        if self.factory.query_error is not None:
            raise self.factory.query_error
        return FakeCursor(self.factory.rows)


class FakePool:
    """Stands in for psycopg_pool.ConnectionPool."""

    def __init__(self, factory, options):
        self.factory = factory
        self.options = options
        self.opened = False
        self.closed = False
        self.open_options = None

    def open(self, wait=False, timeout=30.0):
        self.open_options = {"wait": wait, "timeout": timeout}
        if self.factory.open_error is not None:
            raise self.factory.open_error
        self.opened = True

    @contextmanager
    def connection(self):
        yield FakeConnection(self.factory)

    def close(self):
        self.closed = True
        self.factory.close_calls += 1
        if self.factory.close_error is not None:
            raise self.factory.close_error


class FakePoolFactory:
    """
    Callable with the ConnectionPool signature, returning FakePool objects.

    ``connect`` stands in for psycopg.connect and is used for the health check.
    """

    def __init__(
        self,
        rows=None,
        connect_error=None,
        open_error=None,
        health_error=None,
        query_error=None,
        close_error=None,
    ):
        self.rows = rows or []
        self.connect_error = connect_error
        self.connect_calls = []
        self.open_error = open_error
        self.health_error = health_error
        self.query_error = query_error
        self.close_error = close_error
        self.pools = []
        self.queries = []
        self.close_calls = 0

    def __call__(self, **options):
        pool = FakePool(self, options)
        self.pools.append(pool)
        return pool

    def connect(self, **kwargs):
        self.connect_calls.append(kwargs)
        if self.connect_error is not None:
            raise self.connect_error
        return FakeConnection(self)

    def client(self, postgres_config):
        return DatastoreClient(postgres_config, pool_factory=self, connect=self.connect)

    @property
    def aggregation_queries(self):
        return [q for q in self.queries if q.strip() != "SELECT 1;"]


@pytest.fixture
def temp_dir(tmp_path):
    """
    Provide a temporary directory for tests.

    This wraps pytest's built-in tmp_path fixture for compatibility
    with existing test code that expects a `temp_dir` fixture.
    """
    return tmp_path


@pytest.fixture
def repo_dirs(temp_dir):
    """Existing v1 and v2 repository directories."""
    repo_v1 = temp_dir / "repository-v1"
    repo_v2 = temp_dir / "repository-v2"
    repo_v1.mkdir()
    repo_v2.mkdir()
    return repo_v1, repo_v2


@pytest.fixture
def base_env(repo_dirs):
    """Complete environment for load_config()."""
    repo_v1, repo_v2 = repo_dirs
    return {
        "POSTGRES_HOST": "localhost",
        "POSTGRES_PORT": "5432",
        "POSTGRES_DATABASE": "sourcify",
        "POSTGRES_USER": "sourcify",
        "POSTGRES_PASSWORD": "hunter2",
        "REPOV1_PATH": str(repo_v1),
        "REPOV2_PATH": str(repo_v2),
    }


@pytest.fixture
def config(base_env):
    return load_config(environ=base_env)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def sample_rows():
    """Raw (chain_id, full, partial) rows as the database returns them."""
    return [(1, 10, 2), (137, 5, 0)]


@pytest.fixture
def sample_counts():
    return [
        ChainContractCount(chain_id=1, full=10, partial=2),
        ChainContractCount(chain_id=137, full=5, partial=0),
    ]


@pytest.fixture
def pool_factory(sample_rows):
    return FakePoolFactory(rows=sample_rows)


@pytest.fixture
def make_pool_factory():
    """Build a FakePoolFactory with custom rows or injected failures."""
    return FakePoolFactory
