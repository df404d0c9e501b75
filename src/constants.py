"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_ERROR = 3
    CONFIG_ERROR = 4
    INTERNAL_ERROR = 70


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PROG_NAME = "snapinit"
    PROJECT_CONFIG_FILE = "snapinit.yaml"
    USER_CONFIG_FILES = ["snapinit.yml", ".snapinit.yml"]

    # Package descriptor forms: hand-written YAML and the generated file it produces
    DESCRIPTOR_FILE = "package.yaml"
    DESCRIPTOR_SUFFIX = ".cabal"
    HIDDEN_DIR_PREFIX = "."
    IGNORED_DIRS = ["dist"]

    # Snapshots
    MIN_SUPPORTED_SNAPSHOT = "lts-12.0"
    SNAPSHOT_INDEX_URL = "https://www.stackage.org/download/snapshots.json"
    SNAPSHOT_LTS_URL_TEMPLATE = (
        "https://raw.githubusercontent.com/commercialhaskell/stackage-snapshots/"
        "master/lts/{major}/{minor}.yaml"
    )
    SNAPSHOT_NIGHTLY_URL_TEMPLATE = (
        "https://raw.githubusercontent.com/commercialhaskell/stackage-snapshots/"
        "master/nightly/{year}/{month}/{day}.yaml"
    )

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVEL_ENV = "SNAPINIT_LOG_LEVEL"

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300

    PACKAGE_INDEX_URL_TEMPLATE = "https://hackage.haskell.org/package/{name}/preferred"

    # Shipped with the compiler, so snapshots do not pin them
    COMPILER_BUNDLED_PACKAGES = [
        "array", "base", "binary", "bytestring", "Cabal", "Cabal-syntax",
        "containers", "deepseq", "directory", "exceptions", "filepath", "ghc",
        "ghc-bignum", "ghc-boot", "ghc-boot-th", "ghc-compact", "ghc-heap",
        "ghc-internal", "ghc-prim", "ghci", "haskeline", "hpc", "integer-gmp",
        "mtl", "os-string", "parsec", "pretty", "process", "rts", "stm",
        "template-haskell", "terminfo", "text", "time", "transformers", "unix",
        "Win32", "xhtml",
    ]
