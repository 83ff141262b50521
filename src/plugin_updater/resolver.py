"""
Update resolution for the plugin updater.

The UpdateResolver holds the registrations of one check cycle, fetches the
latest release of each component, and decides which components are
outdated. Failures are isolated per component: a component whose metadata
cannot be fetched or parsed is skipped and the rest of the batch proceeds.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from plugin_updater.errors import (
    InvalidVersionError,
    MetadataFetchError,
    MetadataMalformedError,
    RegistrationRejectedError,
)
from plugin_updater.logging import get_logger
from plugin_updater.models import (
    ComponentDetail,
    ComponentRegistration,
    DisplayMetadata,
    ReleaseDescriptor,
    UpdateDecision,
)
from plugin_updater.version import is_newer

if TYPE_CHECKING:
    from plugin_updater.config import SelfUpdateConfig
    from plugin_updater.provider import ReleaseMetadataProvider

logger = get_logger(__name__)


def self_registration(config: SelfUpdateConfig) -> ComponentRegistration:
    """
    Build the registration that represents the updater's own package.

    Args:
        config: Self-update settings.

    Returns:
        An ordinary ComponentRegistration for the updater.
    """
    return ComponentRegistration(
        identifier=config.identifier,
        repository_source=config.repository_source,
        current_version=config.current_version,
        display=DisplayMetadata(name="Plugin Updater"),
    )


class UpdateResolver:
    """
    Decides which registered components have a newer release.

    The resolver is constructed explicitly and owned by whatever drives the
    check cycle. Its registry lives in memory and is meant to be rebuilt
    each cycle by replaying the host's registration events.

    Example:
        >>> resolver = UpdateResolver(GitHubReleaseProvider())
        >>> resolver.register({"slug": "a/a.php", "repo_url": "o/a", "version": "1.0.0"})
        >>> updates = await resolver.resolve_updates()
    """

    def __init__(
        self,
        provider: ReleaseMetadataProvider,
        self_update: SelfUpdateConfig | None = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            provider: Source of release metadata.
            self_update: Settings describing the updater's own package.
        """
        self._provider = provider
        self._self_update = self_update
        self._registrations: list[ComponentRegistration] = []

    @property
    def provider(self) -> ReleaseMetadataProvider:
        """Return the release metadata provider."""
        return self._provider

    @property
    def registrations(self) -> tuple[ComponentRegistration, ...]:
        """Return the registrations of the current cycle, in order."""
        return tuple(self._registrations)

    @property
    def self_identifier(self) -> str | None:
        """Return the updater's own identifier, if self-update is configured."""
        if self._self_update is None:
            return None
        return self._self_update.identifier

    def register(
        self, descriptor: ComponentRegistration | Mapping[str, Any]
    ) -> ComponentRegistration | None:
        """
        Add a component to the registry for the current cycle.

        Descriptors missing identifier, repository source or version are
        dropped with a warning. Duplicate identifiers are kept as separate
        entries.

        Args:
            descriptor: A ComponentRegistration or a host payload mapping.

        Returns:
            The accepted registration, or None if it was dropped.
        """
        try:
            if isinstance(descriptor, ComponentRegistration):
                registration = descriptor.validate_required()
            else:
                registration = ComponentRegistration.from_payload(descriptor)
        except RegistrationRejectedError as e:
            logger.warning("Registration dropped", extra=e.log_extra())
            return None

        self._registrations.append(registration)
        logger.debug(
            "Component registered",
            extra={"identifier": registration.identifier},
        )
        return registration

    def register_self(self) -> ComponentRegistration | None:
        """
        Register the updater's own package like any other component.

        Returns:
            The registration, or None when self-update is not configured
            or disabled.
        """
        if self._self_update is None or not self._self_update.enabled:
            return None
        return self.register(self_registration(self._self_update))

    def cycle_registrations(self) -> list[ComponentRegistration]:
        """
        Return the registry plus the updater's own registration.

        The self registration is appended last and is not stored, so calling
        this repeatedly does not grow the registry.
        """
        registrations = list(self._registrations)
        if self._self_update is not None and self._self_update.enabled:
            registrations.append(self_registration(self._self_update))
        return registrations

    def clear(self) -> None:
        """Drop all registrations before the next cycle."""
        self._registrations.clear()

    async def _fetch(
        self, registration: ComponentRegistration
    ) -> ReleaseDescriptor | None:
        """
        Fetch the latest release of a component, absorbing failures.

        Returns:
            The release descriptor, or None if it could not be obtained.
        """
        try:
            return await self._provider.fetch_release(
                registration.repository_source,
                registration.access_credential,
            )
        except (MetadataFetchError, MetadataMalformedError) as e:
            logger.warning(
                "Skipping component: release metadata unavailable",
                extra={"identifier": registration.identifier, **e.log_extra()},
            )
            return None

    async def resolve_updates(
        self,
        registrations: Iterable[ComponentRegistration] | None = None,
    ) -> dict[str, UpdateDecision]:
        """
        Determine which components have a newer release.

        Components are evaluated in order, one fetch each. A component is
        reported only when its current version is strictly older than the
        release tag; for duplicated identifiers the last decision written
        wins.

        Args:
            registrations: Registrations to evaluate. Defaults to the
                resolver's own registry.

        Returns:
            Mapping of identifier to UpdateDecision for outdated components.
        """
        candidates = list(
            self._registrations if registrations is None else registrations
        )
        if not candidates:
            return {}

        decisions: dict[str, UpdateDecision] = {}
        for registration in candidates:
            release = await self._fetch(registration)
            if release is None:
                continue

            try:
                outdated = is_newer(
                    release.tag_version, registration.current_version
                )
            except InvalidVersionError as e:
                logger.warning(
                    "Skipping component: version not comparable",
                    extra={"identifier": registration.identifier, **e.log_extra()},
                )
                continue

            if not outdated:
                continue

            decisions[registration.identifier] = UpdateDecision(
                identifier=registration.identifier,
                new_version=release.tag_version,
                info_url=release.release_url or "",
                package_url=release.download_url or "",
            )
            logger.info(
                "Update available",
                extra={
                    "identifier": registration.identifier,
                    "current_version": registration.current_version,
                    "new_version": release.tag_version,
                },
            )

        return decisions

    def find_registration(
        self,
        identifier: str,
        registrations: Sequence[ComponentRegistration] | None = None,
    ) -> ComponentRegistration | None:
        """Return the last registration matching ``identifier``, if any."""
        candidates = self._registrations if registrations is None else registrations
        for registration in reversed(candidates):
            if registration.identifier == identifier:
                return registration
        return None

    async def resolve_detail(
        self,
        identifier: str,
        registrations: Sequence[ComponentRegistration] | None = None,
    ) -> ComponentDetail | None:
        """
        Build the detail record for one component.

        Args:
            identifier: Component slug to look up.
            registrations: Registrations to search. Defaults to the
                resolver's own registry.

        Returns:
            ComponentDetail, or None if no registration matches or its
            release metadata is unavailable.
        """
        registration = self.find_registration(identifier, registrations)
        if registration is None:
            logger.debug(
                "Detail requested for unknown component",
                extra={"identifier": identifier},
            )
            return None

        release = await self._fetch(registration)
        if release is None:
            return None

        return ComponentDetail.merge(registration, release)
