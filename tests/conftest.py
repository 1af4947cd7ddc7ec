"""Shared pytest fixtures for content-sync tests."""

from collections.abc import Iterable, Mapping
from pathlib import Path

import pytest
from dotenv import load_dotenv

from content_sync.config import Config
from content_sync.errors import StorageFailure, TransportFailure
from content_sync.storage.base import DurableStore
from content_sync.sync.state import ConfigCache

load_dotenv()

SAMPLE_DOCUMENT = """\
; Sample content document
[config]
config_updated=2024-03-01-10-00
app_name=Cebaco Beach
app_name_es=Playa Cebaco
github_url=https://example.org/app-config.ini

[hero]
_updated=2024-03-01-10-00
title=Welcome\\nto Cebaco
stat_2=12|Beaches
stat_1=3|Islands

[beach.coco_loco]
_updated=2024-02-01-09-00
name=Coco Loco
capacity=30
amenities=food, hammocks, ,shade
panga_available=FALSE

[footer]
_updated=2024-01-15-08-00
brand_name=Cebaco
email=hola@example.org

[strings_en]
book=Book now

[strings_es]
book=Reservar
"""


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that fetch from a live content URL",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live content URL"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class MemoryStore(DurableStore):
    """In-memory ``DurableStore`` that records every write call."""

    name = "memory"

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.writes: list[dict[str, str]] = []
        self.removals: list[list[str]] = []
        self.fail_reads = False
        self.fail_writes = False
        self.closed = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageFailure("read failed")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.set_multiple({key: value})

    async def remove(self, key: str) -> None:
        await self.remove_multiple([key])

    async def set_multiple(self, items: Mapping[str, str]) -> None:
        if self.fail_writes:
            raise StorageFailure("write failed")
        self.writes.append(dict(items))
        self.data.update(items)

    async def remove_multiple(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        self.removals.append(keys)
        for key in keys:
            self.data.pop(key, None)

    async def close(self) -> None:
        self.closed = True


class FakeSource:
    """Stand-in for ``RemoteSource`` returning queued documents or failures."""

    def __init__(self, *responses, url: str = "https://example.org/app-config.ini"):
        self.url = url
        self.responses = list(responses)
        self.calls = 0
        self.closed = False

    async def fetch(self) -> str:
        self.calls += 1
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def sample_document() -> str:
    return SAMPLE_DOCUMENT


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache(memory_store) -> ConfigCache:
    return ConfigCache(memory_store, "test")


@pytest.fixture
def offline() -> TransportFailure:
    return TransportFailure(["httpx failed: boom", "requests failed: boom"])


@pytest.fixture
def mock_config(tmp_path: Path) -> Config:
    """Create a Config instance for testing."""
    return Config(
        source_url="https://example.org/app-config.ini",
        storage_backend="files",
        cache_dir=str(tmp_path / "cache"),
        namespace="test",
        timeout=5.0,
    )


@pytest.fixture
def make_source():
    """Factory fixture for ``FakeSource`` instances."""

    def _create(*responses, url: str = "https://example.org/app-config.ini"):
        return FakeSource(*responses, url=url)

    return _create
