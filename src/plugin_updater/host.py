"""
Host adapter for the plugin updater.

The host (WordPress) drives the updater through lifecycle events: plugins
announce themselves, the update transient is about to be saved, a
plugin-information popup is opened, a package has just been installed, and
the auto-update setting is queried. HostAdapter translates each of these
events into explicit calls on UpdateResolver and the relocation step.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from plugin_updater.errors import FailedPreconditionError, InvalidArgumentError
from plugin_updater.logging import get_logger
from plugin_updater.models import ComponentRegistration
from plugin_updater.relocation import relocate_install
from plugin_updater.resolver import UpdateResolver

if TYPE_CHECKING:
    from plugin_updater.config import AppConfig

logger = get_logger(__name__)

PLUGIN_INFORMATION_ACTION = "plugin_information"


def _item_slug(item: Any) -> str | None:
    """Read ``slug`` from a mapping or an attribute-style host object."""
    if isinstance(item, Mapping):
        return item.get("slug")
    return getattr(item, "slug", None)


@dataclass
class UpdateTransient:
    """
    The host's update-check exchange object.

    Attributes:
        checked: Installed plugin slugs mapped to their versions. Empty
            when the host has not run a check yet.
        response: Slugs mapped to available-update entries.
    """

    checked: dict[str, str] = field(default_factory=dict)
    response: dict[str, dict[str, str]] = field(default_factory=dict)


class HostAdapter:
    """
    Translates host lifecycle events into resolver calls.

    Attributes:
        resolver: The resolver owned by the current process.
        plugins_dir: Directory holding installed plugins.
        auto_update_self: Whether the updater opts itself into auto-updates.
    """

    def __init__(
        self,
        resolver: UpdateResolver,
        plugins_dir: Path | str,
        *,
        auto_update_self: bool = True,
    ) -> None:
        self.resolver = resolver
        self.plugins_dir = Path(plugins_dir)
        self.auto_update_self = auto_update_self

    @classmethod
    def from_config(cls, resolver: UpdateResolver, config: AppConfig) -> HostAdapter:
        """
        Create an adapter from application configuration.

        Args:
            resolver: The resolver owned by the current process.
            config: Loaded configuration; ``install.plugins_dir`` and
                ``self_update.auto_update`` are used.

        Returns:
            Configured HostAdapter.
        """
        return cls(
            resolver,
            config.install.plugins_dir,
            auto_update_self=config.self_update.auto_update,
        )

    def on_register_component(
        self, payload: Mapping[str, Any]
    ) -> ComponentRegistration | None:
        """Handle a plugin's registration event."""
        return self.resolver.register(payload)

    async def on_update_check(self, transient: UpdateTransient) -> UpdateTransient:
        """
        Fill the update transient with available updates.

        A transient without checked entries is returned untouched.

        Args:
            transient: The host's update transient.

        Returns:
            The same transient, with response entries added.
        """
        if not transient.checked:
            return transient

        decisions = await self.resolver.resolve_updates(
            self.resolver.cycle_registrations()
        )
        for identifier, decision in decisions.items():
            transient.response[identifier] = decision.to_transient_entry()

        return transient

    async def on_plugin_information(
        self,
        result: Any,
        action: str,
        args: Any,
    ) -> Any:
        """
        Answer a plugin-information query for a registered component.

        Args:
            result: Value the host would use if nobody answers.
            action: Query action; only "plugin_information" is handled.
            args: Query arguments carrying the ``slug``, as a mapping or an
                object with a ``slug`` attribute.

        Returns:
            The detail record as a dict, or ``result`` unchanged.
        """
        if action != PLUGIN_INFORMATION_ACTION:
            return result

        slug = _item_slug(args)
        if not slug:
            return result

        detail = await self.resolver.resolve_detail(
            slug, self.resolver.cycle_registrations()
        )
        if detail is None:
            return result

        return detail.model_dump()

    def on_post_install(
        self,
        hook_extra: Mapping[str, Any],
        result: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Relocate a freshly installed package of a known component.

        Args:
            hook_extra: Install context; ``plugin`` holds the slug.
            result: Install result; ``destination`` holds the staging path.

        Returns:
            The install result, with ``destination`` updated if relocated.
        """
        slug = hook_extra.get("plugin")
        if not slug or "destination" not in result:
            return result

        known = {r.identifier for r in self.resolver.cycle_registrations()}
        if slug not in known:
            return result

        try:
            target = relocate_install(result["destination"], slug, self.plugins_dir)
        except (InvalidArgumentError, FailedPreconditionError) as e:
            logger.error("Install relocation failed", extra=e.log_extra())
            raise

        return {**result, "destination": str(target)}

    def on_auto_update(self, update: Any, item: Any) -> Any:
        """
        Opt the updater into host auto-updates.

        Args:
            update: The host's current decision.
            item: Plugin item; a mapping or object with a ``slug``.

        Returns:
            True for the updater itself when enabled, else ``update``.
        """
        slug = _item_slug(item)
        if self.auto_update_self and slug and slug == self.resolver.self_identifier:
            return True
        return update
