"""
Release metadata providers for the plugin updater.

A provider turns a component's repository source into a ReleaseDescriptor.
The GitHub implementation queries the "latest release" endpoint of the
REST API once per call, with no caching and no retries.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import httpx

from plugin_updater.errors import (
    InvalidRepositorySourceError,
    MetadataFetchError,
    MetadataMalformedError,
)
from plugin_updater.logging import get_logger
from plugin_updater.models import ReleaseDescriptor

if TYPE_CHECKING:
    from plugin_updater.config import GitHubConfig

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "WordPress"
GITHUB_ACCEPT = "application/vnd.github.v3+json"
MAX_REDIRECTS = 5

_OWNER_REPO_PATTERN = re.compile(r"^(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?/?$")
_GITHUB_PAGE_PATTERN = re.compile(
    r"^https?://(?:www\.)?github\.com/(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)"
    r"(?:\.git)?(?:/.*)?$"
)


class ReleaseMetadataProvider(ABC):
    """
    Abstract source of release metadata.

    Implementations raise MetadataFetchError for transport problems and
    MetadataMalformedError for unusable bodies; the resolver treats both
    as "no release" for the component at hand.
    """

    @abstractmethod
    async def fetch_release(
        self,
        repository_source: str,
        access_credential: str | None = None,
    ) -> ReleaseDescriptor:
        """
        Fetch the latest release for a repository source.

        Args:
            repository_source: Opaque locator from the registration.
            access_credential: Optional token for private repositories.

        Returns:
            ReleaseDescriptor of the latest release.

        Raises:
            MetadataFetchError: If the metadata cannot be retrieved.
            MetadataMalformedError: If the response is unusable.
        """


class GitHubReleaseProvider(ReleaseMetadataProvider):
    """
    Fetches latest-release documents from the GitHub REST API.

    Example:
        >>> provider = GitHubReleaseProvider()
        >>> release = await provider.fetch_release("octo/hello-plugin")
        >>> release.tag_version
        '1.4.0'
    """

    def __init__(
        self,
        api_base_url: str = DEFAULT_API_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float = 10.0,
        default_token: str | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            api_base_url: Base URL of the GitHub API.
            user_agent: User-Agent header value.
            timeout_seconds: HTTP timeout per request.
            default_token: Token used when a component has no credential.
        """
        self._api_base_url = api_base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout_seconds
        self._default_token = default_token

    @classmethod
    def from_config(cls, config: GitHubConfig) -> GitHubReleaseProvider:
        """Create a provider from GitHubConfig."""
        return cls(
            api_base_url=config.api_base_url,
            user_agent=config.user_agent,
            timeout_seconds=config.timeout_seconds,
            default_token=config.token,
        )

    @property
    def api_base_url(self) -> str:
        """Return the API base URL."""
        return self._api_base_url

    @property
    def timeout_seconds(self) -> float:
        """Return the HTTP timeout in seconds."""
        return self._timeout

    def build_release_url(self, repository_source: str) -> str:
        """
        Derive the latest-release API URL from a repository source.

        API URLs are used unchanged; GitHub page URLs and "owner/repo"
        pairs map to ``{api}/repos/{owner}/{repo}/releases/latest``.

        Raises:
            InvalidRepositorySourceError: If the source is not recognized.
        """
        source = repository_source.strip()

        match = _GITHUB_PAGE_PATTERN.match(source)
        if match is None and not source.startswith(("http://", "https://")):
            match = _OWNER_REPO_PATTERN.match(source)

        if match is not None:
            return (
                f"{self._api_base_url}/repos/"
                f"{match.group('owner')}/{match.group('repo')}/releases/latest"
            )

        if source.startswith(("http://", "https://")):
            return source

        raise InvalidRepositorySourceError(
            f"Unrecognized repository source: {repository_source!r}",
            details={"repository_source": repository_source},
        )

    def build_headers(self, access_credential: str | None = None) -> dict[str, str]:
        """Build request headers, adding a token when one is available."""
        headers = {
            "Accept": GITHUB_ACCEPT,
            "User-Agent": self._user_agent,
        }
        token = access_credential or self._default_token
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    async def fetch_release(
        self,
        repository_source: str,
        access_credential: str | None = None,
    ) -> ReleaseDescriptor:
        """
        Fetch and parse the latest release of a repository.

        Raises:
            MetadataFetchError: On transport errors or non-2xx responses.
            MetadataMalformedError: On empty, non-JSON or tag-less bodies.
        """
        url = self.build_release_url(repository_source)
        logger.debug("Fetching release metadata", extra={"url": url})

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                max_redirects=MAX_REDIRECTS,
            ) as client:
                response = await client.get(
                    url, headers=self.build_headers(access_credential)
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MetadataFetchError(
                f"Release lookup returned HTTP {e.response.status_code}",
                details={"url": url, "status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise MetadataFetchError(
                f"Release lookup failed: {e}",
                details={"url": url, "error": str(e)},
            ) from e

        if not response.content.strip():
            raise MetadataMalformedError(
                "Release lookup returned an empty body",
                details={"url": url},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MetadataMalformedError(
                f"Release metadata is not valid JSON: {e}",
                details={"url": url},
            ) from e

        return ReleaseDescriptor.from_github(payload)
