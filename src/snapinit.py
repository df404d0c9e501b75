"""snapinit - initialize a project configuration from local package descriptors.

    Returns:
        int: Exit code
"""
import logging
import sys
from pathlib import Path

from args import parse_args
from buildplan.checker import SnapshotPlanChecker
from buildplan.index import PackageIndex
from cli_config import apply_cli_overrides, apply_config_overrides, load_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from descriptor.loader import DescriptorLoader
from discovery.packages import PackageFinder
from errors import ConfigError, InitFailure
from initializer import init_project
from resolution.options import InitOptions
from snapshots.contents import SnapshotContentsSource
from snapshots.models import SnapName, SnapshotLocation
from snapshots.source import SnapshotSource

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure console and optional file logging from CLI arguments."""
    configure_logging("ERROR" if args.QUIET else args.LOG_LEVEL)
    if args.LOG_FILE:
        file_handler = logging.FileHandler(args.LOG_FILE)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", args.LOG_FILE)


def build_options(args) -> InitOptions:
    """Translate parsed arguments into run options."""
    return InitOptions(
        search_dirs=tuple(args.DIRS),
        omit_packages=args.OMIT_PACKAGES,
        force_overwrite=args.FORCE,
        include_subdirs=args.INCLUDE_SUBDIRS,
    )


def run(args, project_root: Path) -> Path:
    """Wire the default collaborators from ``Constants`` and initialize."""
    loader = DescriptorLoader(Constants.DESCRIPTOR_FILE, Constants.DESCRIPTOR_SUFFIX)
    finder = PackageFinder(
        Constants.DESCRIPTOR_FILE,
        Constants.DESCRIPTOR_SUFFIX,
        Constants.IGNORED_DIRS,
        Constants.HIDDEN_DIR_PREFIX,
    )
    contents = SnapshotContentsSource(
        Constants.SNAPSHOT_LTS_URL_TEMPLATE,
        Constants.SNAPSHOT_NIGHTLY_URL_TEMPLATE,
        base_dir=project_root,
    )
    extra_index = None if args.NO_EXTRA_DEPS else PackageIndex(Constants.PACKAGE_INDEX_URL_TEMPLATE)
    oracle = SnapshotPlanChecker(
        contents, loader, extra_index, bundled=Constants.COMPILER_BUNDLED_PACKAGES
    )

    explicit = None
    if args.SNAPSHOT:
        try:
            explicit = SnapshotLocation.parse(args.SNAPSHOT)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    return init_project(
        project_root,
        build_options(args),
        explicit,
        loader=loader,
        oracle=oracle,
        snapshot_source=SnapshotSource(Constants.SNAPSHOT_INDEX_URL),
        finder=finder,
        min_supported=SnapName.parse(Constants.MIN_SUPPORTED_SNAPSHOT),
    )


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main"),
        )

    try:
        apply_config_overrides(load_config(args.CONFIG))
        apply_cli_overrides(args)
        run(args, Path.cwd())
    except InitFailure as exc:
        logger.error("%s", exc)
        sys.exit(exc.exit_code.value)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
