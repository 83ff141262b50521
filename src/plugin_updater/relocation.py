"""
Post-install relocation for the plugin updater.

GitHub archives extract into a directory named after the repository and
commit (e.g. "owner-repo-1a2b3c4"). After the host has installed such a
package, the extracted tree must be moved into the directory the plugin
is expected to live in, derived from its slug.

This step is invoked explicitly after a successful install and is never
triggered by update resolution.
"""

from __future__ import annotations

import shutil
from pathlib import Path, PurePosixPath

from plugin_updater.errors import FailedPreconditionError, InvalidArgumentError
from plugin_updater.logging import get_logger

logger = get_logger(__name__)

# Sibling name the previous install is parked under while a new one moves in
BACKUP_SUFFIX = ".relocate-backup"


def install_directory_for(identifier: str, plugins_dir: Path | str) -> Path:
    """
    Derive a component's install directory from its identifier.

    "my-plugin/my-plugin.php" installs into ``plugins_dir/my-plugin``;
    a single-file slug such as "hello.php" installs into ``plugins_dir/hello``.

    Args:
        identifier: Component slug.
        plugins_dir: Directory holding installed plugins.

    Returns:
        The install directory path.

    Raises:
        InvalidArgumentError: If the identifier is empty or escapes plugins_dir.
    """
    slug = PurePosixPath(identifier.strip().replace("\\", "/"))
    if not slug.parts or slug.is_absolute() or ".." in slug.parts:
        raise InvalidArgumentError(
            f"Invalid component identifier for install: {identifier!r}",
            details={"identifier": identifier},
        )

    folder = slug.parts[0] if len(slug.parts) > 1 else slug.name.removesuffix(".php")
    if not folder or folder == ".":
        raise InvalidArgumentError(
            f"Invalid component identifier for install: {identifier!r}",
            details={"identifier": identifier},
        )

    return Path(plugins_dir) / folder


def _restore_backup(backup: Path, target: Path) -> None:
    """Put a parked install back after a failed move."""
    if not backup.exists():
        return
    try:
        if target.exists():
            shutil.rmtree(target)
        backup.rename(target)
    except OSError as e:
        logger.error(
            "Failed to restore previous install",
            extra={"backup": str(backup), "target": str(target), "error": str(e)},
        )


def relocate_install(
    staging_path: Path | str,
    identifier: str,
    plugins_dir: Path | str,
) -> Path:
    """
    Move an extracted package into the component's install directory.

    An existing install directory is replaced. It is parked under a
    sibling backup name until the new tree is in place, and restored if
    the move fails. If the staged package already sits at the install
    directory nothing is moved.

    Args:
        staging_path: Directory the host extracted the package into.
        identifier: Component slug.
        plugins_dir: Directory holding installed plugins.

    Returns:
        The final install directory.

    Raises:
        InvalidArgumentError: If the identifier is invalid.
        FailedPreconditionError: If the staged package is missing or the
            move fails.
    """
    source = Path(staging_path)
    target = install_directory_for(identifier, plugins_dir)

    if not source.exists():
        raise FailedPreconditionError(
            f"Staged package does not exist: {source}",
            details={"staging_path": str(source), "identifier": identifier},
        )

    if source.resolve() == target.resolve():
        return target

    backup = target.with_name(f".{target.name}{BACKUP_SUFFIX}")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if backup.exists():
            shutil.rmtree(backup)
        if target.exists():
            target.rename(backup)
        shutil.move(str(source), str(target))
    except OSError as e:
        _restore_backup(backup, target)
        raise FailedPreconditionError(
            f"Failed to relocate install: {e}",
            details={
                "staging_path": str(source),
                "target": str(target),
                "error": str(e),
            },
        ) from e

    if backup.exists():
        shutil.rmtree(backup, ignore_errors=True)

    logger.info(
        "Install relocated",
        extra={"identifier": identifier, "target": str(target)},
    )
    return target
