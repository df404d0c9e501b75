"""Argument parsing functionality for snapinit."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog=Constants.PROG_NAME,
        description=(
            "snapinit - Create a project configuration file by discovering "
            "local packages and selecting a snapshot that builds them"
        ),
        add_help=True,
    )

    parser.add_argument("DIRS",
                        help="Directories to search for package descriptors "
                             "(default: the current directory)",
                        nargs="*",
                        default=[])
    parser.add_argument("--snapshot",
                        dest="SNAPSHOT",
                        help="Use this snapshot (e.g. lts-22.28, nightly-2024-07-05, "
                             "ghc-9.6.6, a URL or a file) instead of picking one",
                        action="store",
                        type=str)
    parser.add_argument("--omit-packages",
                        dest="OMIT_PACKAGES",
                        help="Exclude conflicting or incompatible user packages",
                        action="store_true")
    parser.add_argument("--force",
                        dest="FORCE",
                        help="Overwrite an existing project configuration file",
                        action="store_true")
    parser.add_argument("--ignore-subdirs",
                        dest="INCLUDE_SUBDIRS",
                        help="Do not search for package descriptors in subdirectories",
                        action="store_false")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML or JSON configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--snapshot-index-url",
                        dest="SNAPSHOT_INDEX_URL",
                        help="URL of the index of available snapshots",
                        action="store",
                        type=str)
    parser.add_argument("--no-extra-deps",
                        dest="NO_EXTRA_DEPS",
                        help="Never add dependencies from outside the snapshot",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only log errors to the console.",
                        action="store_true")

    return parser.parse_args(argv)
