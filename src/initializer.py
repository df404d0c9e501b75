"""Project initialization: discover, deduplicate, resolve, assemble, write.

``resolve_project`` runs the pipeline and returns the draft without touching
the filesystem beyond reading descriptors; ``init_project`` adds the
overwrite check and writes the configuration file.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from assembly.assembler import ProjectConfigDraft, assemble_config
from assembly.writer import write_config
from buildplan.checker import BuildPlanOracle
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from descriptor.loader import DirectoryLoader
from discovery.dedupe import dedupe_packages
from discovery.packages import PackageFinder
from errors import ConfigError, ConfigFileAlreadyExists
from resolution.options import InitOptions
from resolution.resolver import DEFAULT_MIN_SUPPORTED, ConvergenceResolver, SnapshotLister
from snapshots.models import SnapName, SnapshotLocation

logger = logging.getLogger(__name__)


def _search_roots(project_root: Path, options: InitOptions):
    if not options.search_dirs:
        return [project_root]
    roots = [(project_root / d).resolve() for d in options.search_dirs]
    missing = [str(r) for r in roots if not r.is_dir()]
    if missing:
        raise ConfigError(f"Search directories do not exist: {', '.join(missing)}")
    return roots


def resolve_project(
    project_root: Path,
    options: InitOptions,
    explicit_snapshot: Optional[SnapshotLocation] = None,
    *,
    loader: DirectoryLoader,
    oracle: BuildPlanOracle,
    snapshot_source: Optional[SnapshotLister] = None,
    finder: Optional[PackageFinder] = None,
    min_supported: SnapName = DEFAULT_MIN_SUPPORTED,
) -> ProjectConfigDraft:
    """Compute the project configuration for ``project_root``.

    Args:
        project_root: Absolute project directory.
        options: Run options.
        explicit_snapshot: Snapshot to use instead of ranking candidates.
        loader: Loads package descriptors.
        oracle: Build-plan oracle.
        snapshot_source: Lists available snapshots; needed only without
            ``explicit_snapshot``.
        finder: Package finder; defaults to the built-in descriptor forms.
        min_supported: Oldest stable snapshot offered as a candidate.

    Returns:
        ProjectConfigDraft for the chosen snapshot and surviving packages.
    """
    project_root = Path(project_root).resolve()
    finder = finder or PackageFinder()
    roots = _search_roots(project_root, options)
    logger.info(
        "Looking for package descriptors in:\n%s",
        "\n".join(f"  - {r}" for r in roots),
    )

    with Timer() as timer:
        found = finder.discover(roots, options.include_subdirs, loader)
    if is_debug_enabled(logger):
        logger.debug(
            "Discovery finished",
            extra=extra_context(
                event="function_exit", component="initializer", action="discover",
                count=len(found), duration_ms=timer.duration_ms(),
            ),
        )

    canonical, duplicates = dedupe_packages(found)
    package_dirs = {name: pkg.ref.directory for name, pkg in canonical.items()}

    resolver = ConvergenceResolver(oracle, options, snapshot_source, min_supported)
    plan = resolver.resolve(package_dirs, explicit_snapshot)
    draft = assemble_config(project_root, plan, canonical, duplicates)

    total = len(found)
    logger.info("Considered %d user %s.", total, "package" if total == 1 else "packages")
    groups = draft.diagnostics
    if groups.duplicates:
        logger.warning(
            "Ignoring these %d duplicate packages:\n%s",
            len(groups.duplicates),
            "\n".join(f"  - {p}" for p in groups.duplicates),
        )
    if groups.incompatible:
        logger.warning(
            "Ignoring these %d packages due to dependency conflicts:\n%s",
            len(groups.incompatible),
            "\n".join(f"  - {p}" for p in groups.incompatible),
        )
    if groups.extra_deps:
        logger.warning("%d external dependencies were added.", len(groups.extra_deps))
    return draft


def init_project(
    project_root: Path,
    options: InitOptions,
    explicit_snapshot: Optional[SnapshotLocation] = None,
    *,
    config_file: str = Constants.PROJECT_CONFIG_FILE,
    **collaborators,
) -> Path:
    """Write the project configuration file for ``project_root``.

    Keyword arguments other than ``config_file`` are passed to
    ``resolve_project``.

    Returns:
        Path of the written configuration file.

    Raises:
        ConfigFileAlreadyExists: the file exists and ``force_overwrite`` is off.
    """
    project_root = Path(project_root).resolve()
    dest = project_root / config_file
    exists = dest.is_file()
    if exists and not options.force_overwrite:
        raise ConfigFileAlreadyExists(dest)

    draft = resolve_project(project_root, options, explicit_snapshot, **collaborators)
    logger.info(
        "Initialising the project configuration using snapshot %s.", draft.snapshot
    )
    logger.info(
        "%s %s.",
        "Overwriting existing configuration file" if exists else "Writing configuration to",
        dest.name,
    )
    write_config(dest, draft)
    logger.info("The project configuration file has been initialised.")
    return dest
