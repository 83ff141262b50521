"""
Pytest configuration for the plugin updater tests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from plugin_updater.errors import MetadataFetchError, UpdaterError
from plugin_updater.models import ReleaseDescriptor
from plugin_updater.provider import ReleaseMetadataProvider

# Configure pytest-asyncio mode
pytest_plugins = ["pytest_asyncio"]


class FakeReleaseProvider(ReleaseMetadataProvider):
    """
    In-memory provider keyed by repository source.

    Values are either a ReleaseDescriptor or an UpdaterError to raise.
    Every call is recorded as (repository_source, access_credential).
    """

    def __init__(
        self, releases: dict[str, ReleaseDescriptor | UpdaterError] | None = None
    ) -> None:
        self.releases = releases or {}
        self.calls: list[tuple[str, str | None]] = []

    async def fetch_release(
        self,
        repository_source: str,
        access_credential: str | None = None,
    ) -> ReleaseDescriptor:
        self.calls.append((repository_source, access_credential))
        outcome = self.releases.get(repository_source)
        if outcome is None:
            raise MetadataFetchError(
                "Not found", details={"repository_source": repository_source}
            )
        if isinstance(outcome, UpdaterError):
            raise outcome
        return outcome


@pytest.fixture
def fake_provider() -> FakeReleaseProvider:
    """Provider with no releases configured."""
    return FakeReleaseProvider()


@pytest.fixture(autouse=True)
def _cleanup_loggers() -> Iterator[None]:
    """Remove handlers installed on the package logger by a test."""
    yield
    logger = logging.getLogger("plugin_updater")
    logger.handlers.clear()
    logger.propagate = True
