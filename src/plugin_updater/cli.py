"""
Command-line entry point for the plugin updater.

Runs one check cycle outside the host: the configured components are
registered, their releases are resolved, and the result is printed as JSON.

    plugin-updater --config updater.yml check
    plugin-updater --config updater.yml info my-plugin/my-plugin.php
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import TextIO

from plugin_updater.config import AppConfig, build_arg_parser, load_config
from plugin_updater.errors import ComponentNotFoundError, UpdaterError
from plugin_updater.logging import get_logger, setup_logging
from plugin_updater.provider import GitHubReleaseProvider
from plugin_updater.resolver import UpdateResolver

logger = get_logger(__name__)


def build_resolver(config: AppConfig) -> UpdateResolver:
    """
    Create a resolver with the configured components registered.

    Args:
        config: Loaded application configuration.

    Returns:
        UpdateResolver holding this cycle's registrations.
    """
    resolver = UpdateResolver(
        GitHubReleaseProvider.from_config(config.github),
        self_update=config.self_update,
    )
    for payload in config.components:
        resolver.register(payload)
    return resolver


async def run_check(config: AppConfig) -> dict[str, dict[str, str]]:
    """Resolve updates for all configured components and the updater."""
    resolver = build_resolver(config)
    decisions = await resolver.resolve_updates(resolver.cycle_registrations())
    return {
        identifier: decision.model_dump()
        for identifier, decision in decisions.items()
    }


async def run_info(config: AppConfig, slug: str) -> dict[str, object]:
    """
    Build the detail record for one component.

    Raises:
        ComponentNotFoundError: If the slug is unknown or has no release.
    """
    resolver = build_resolver(config)
    detail = await resolver.resolve_detail(slug, resolver.cycle_registrations())
    if detail is None:
        raise ComponentNotFoundError(
            f"No release information for component: {slug}",
            details={"slug": slug},
        )
    return detail.model_dump()


def main(argv: list[str] | None = None, stdout: TextIO | None = None) -> int:
    """
    Run the command line.

    Args:
        argv: Arguments without the program name. Defaults to sys.argv.
        stdout: Output stream. Defaults to sys.stdout.

    Returns:
        Process exit code.
    """
    out = stdout if stdout is not None else sys.stdout
    args = list(sys.argv[1:] if argv is None else argv)
    parsed = build_arg_parser().parse_args(args)

    config = load_config(cli_args=args)
    # Logs go to stderr so stdout stays valid JSON
    setup_logging(config.logging, stream=sys.stderr)

    command = parsed.command or "check"
    try:
        if command == "info":
            result: object = asyncio.run(run_info(config, parsed.slug))
        else:
            result = asyncio.run(run_check(config))
    except ComponentNotFoundError as e:
        out.write(json.dumps(e.to_dict(), indent=2) + "\n")
        return 1
    except UpdaterError as e:
        logger.error("Command failed", extra=e.log_extra())
        out.write(json.dumps(e.to_dict(), indent=2) + "\n")
        return 2

    out.write(json.dumps(result, indent=2) + "\n")
    return 0
