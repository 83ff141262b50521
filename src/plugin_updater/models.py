"""
Data models for the plugin updater.

This module defines the explicit structures exchanged during a check cycle:
- ComponentRegistration: one updatable plugin, as registered by the host
- ReleaseDescriptor: the latest release of a repository
- UpdateDecision: an available update for one component
- ComponentDetail: the merged record answering a plugin-information query
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from plugin_updater.errors import MetadataMalformedError, RegistrationRejectedError

UNKNOWN_VERSION = "unknown"
NO_CHANGELOG = "No changelog available."

# Host payload keys accepted for each registration field, preferred first.
_PAYLOAD_ALIASES: dict[str, tuple[str, ...]] = {
    "identifier": ("identifier", "slug"),
    "repository_source": ("repository_source", "repo_url"),
    "current_version": ("current_version", "version"),
    "access_credential": ("access_credential", "access_token"),
}

REQUIRED_REGISTRATION_FIELDS = ("identifier", "repository_source", "current_version")


def _pick(payload: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the first present, non-None value among ``keys``."""
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    """Coerce an optional payload value into a stripped string."""
    if value is None:
        return ""
    return str(value).strip()


# =============================================================================
# Registration
# =============================================================================


class DisplayMetadata(BaseModel):
    """
    Human-facing fields of a registration.

    These have no effect on resolution; they only feed ComponentDetail.
    """

    name: str = Field(default="", description="Plugin display name")
    author: str = Field(default="", description="Plugin author")
    homepage: str = Field(default="", description="Plugin homepage URL")
    description: str = Field(default="", description="Plugin description")


class ComponentRegistration(BaseModel):
    """
    One updatable unit registered for a check cycle.

    Attributes:
        identifier: Stable slug, e.g. "my-plugin/my-plugin.php".
        repository_source: "owner/repo", a GitHub page URL or an API URL.
        current_version: Version installed on the host.
        access_credential: Token for private repositories.
        display: Human-facing metadata.
    """

    identifier: str = Field(..., description="Stable component slug")
    repository_source: str = Field(..., description="Release metadata locator")
    current_version: str = Field(..., description="Installed version")
    access_credential: str | None = Field(
        default=None,
        description="Token used to authenticate the metadata fetch",
    )
    display: DisplayMetadata = Field(
        default_factory=DisplayMetadata,
        description="Human-facing metadata",
    )

    def missing_fields(self) -> list[str]:
        """Return the required fields that are empty."""
        return [
            name
            for name in REQUIRED_REGISTRATION_FIELDS
            if not getattr(self, name).strip()
        ]

    def validate_required(self) -> ComponentRegistration:
        """
        Ensure identifier, repository source and version are non-empty.

        Returns:
            The registration itself.

        Raises:
            RegistrationRejectedError: If any required field is empty.
        """
        missing = self.missing_fields()
        if missing:
            raise RegistrationRejectedError(
                "Registration is missing required fields",
                details={"identifier": self.identifier, "missing": missing},
            )
        return self

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ComponentRegistration:
        """
        Build a registration from a host registration payload.

        Both the host's keys (slug, repo_url, version, access_token) and the
        field names of this model are accepted.

        Args:
            payload: Associative registration payload.

        Returns:
            A validated ComponentRegistration.

        Raises:
            RegistrationRejectedError: If a required field is missing or empty.
        """
        values = {
            field: _text(_pick(payload, aliases))
            for field, aliases in _PAYLOAD_ALIASES.items()
        }
        display = payload.get("display")
        if not isinstance(display, Mapping):
            display = payload

        registration = cls(
            identifier=values["identifier"],
            repository_source=values["repository_source"],
            current_version=values["current_version"],
            access_credential=values["access_credential"] or None,
            display=DisplayMetadata(
                name=_text(display.get("name")),
                author=_text(display.get("author")),
                homepage=_text(display.get("homepage")),
                description=_text(display.get("description")),
            ),
        )
        return registration.validate_required()


# =============================================================================
# Release metadata
# =============================================================================


class ReleaseDescriptor(BaseModel):
    """
    The latest published release of a repository.

    Attributes:
        tag_version: Latest published version (the release tag).
        published_at: Publication timestamp as sent by the source.
        release_url: Human-facing release page.
        download_url: Archive download URL.
        notes: Changelog text.
    """

    tag_version: str = Field(..., description="Latest published version")
    published_at: str | None = Field(default=None, description="Publication time")
    release_url: str | None = Field(default=None, description="Release page URL")
    download_url: str | None = Field(default=None, description="Archive URL")
    notes: str | None = Field(default=None, description="Changelog text")

    @classmethod
    def from_github(cls, payload: Any) -> ReleaseDescriptor:
        """
        Build a descriptor from a GitHub "latest release" document.

        Args:
            payload: Decoded JSON body.

        Returns:
            ReleaseDescriptor.

        Raises:
            MetadataMalformedError: If the body is not an object or has no
                usable tag_name.
        """
        if not isinstance(payload, Mapping):
            raise MetadataMalformedError(
                "Release metadata is not a JSON object",
                details={"type": type(payload).__name__},
            )

        tag = payload.get("tag_name")
        if not isinstance(tag, str) or not tag.strip():
            raise MetadataMalformedError(
                "Release metadata has no tag_name",
                details={"keys": sorted(payload.keys())},
            )

        def optional(key: str) -> str | None:
            value = payload.get(key)
            return str(value) if value is not None else None

        return cls(
            tag_version=tag.strip(),
            published_at=optional("published_at"),
            release_url=optional("html_url"),
            download_url=optional("zipball_url"),
            notes=optional("body"),
        )


# =============================================================================
# Resolution results
# =============================================================================


class UpdateDecision(BaseModel):
    """
    An available update for one component.

    Attributes:
        identifier: Component slug.
        new_version: Version offered by the release.
        info_url: Release page URL, or "".
        package_url: Archive download URL, or "".
    """

    identifier: str
    new_version: str
    info_url: str = ""
    package_url: str = ""

    def to_transient_entry(self) -> dict[str, str]:
        """Return the entry the host stores in its update transient."""
        return {
            "slug": self.identifier,
            "new_version": self.new_version,
            "url": self.info_url,
            "package": self.package_url,
        }


class DetailSections(BaseModel):
    """Text sections of a plugin-information record."""

    description: str = ""
    changelog: str = NO_CHANGELOG


class ComponentDetail(BaseModel):
    """
    Merged record for a plugin-information query.

    Registration display metadata is combined with remote release fields.
    Every remote field falls back to a placeholder instead of None.
    """

    slug: str
    name: str = ""
    version: str = UNKNOWN_VERSION
    author: str = ""
    homepage: str = ""
    last_updated: str = ""
    sections: DetailSections = Field(default_factory=DetailSections)
    download_link: str = ""

    @classmethod
    def merge(
        cls, registration: ComponentRegistration, release: ReleaseDescriptor
    ) -> ComponentDetail:
        """
        Merge a registration with its latest release.

        Args:
            registration: The matching registration.
            release: The fetched release descriptor.

        Returns:
            ComponentDetail with placeholders for absent remote fields.
        """
        return cls(
            slug=registration.identifier,
            name=registration.display.name,
            version=release.tag_version or UNKNOWN_VERSION,
            author=registration.display.author,
            homepage=registration.display.homepage,
            last_updated=release.published_at or "",
            sections=DetailSections(
                description=registration.display.description,
                changelog=release.notes or NO_CHANGELOG,
            ),
            download_link=release.download_url or "",
        )
