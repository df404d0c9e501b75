"""Package discovery: find descriptor directories and load their descriptors."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from descriptor.loader import DirectoryLoader, PackageDescriptor
from discovery.walker import find_files
from errors import DescriptorNameMismatch, PackageNameInvalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageDescriptorRef:
    """Location of one discovered descriptor."""
    path: Path
    directory: Path


@dataclass(frozen=True)
class DiscoveredPackage:
    """A successfully loaded descriptor and the name it declares."""
    ref: PackageDescriptorRef
    name: str
    descriptor: PackageDescriptor


class PackageFinder:
    """Locate package directories below search roots.

    Descriptor forms, ignored directory names and the hidden-directory
    prefix are explicit so callers and tests can vary them.
    """

    def __init__(
        self,
        descriptor_file: str = Constants.DESCRIPTOR_FILE,
        descriptor_suffix: str = Constants.DESCRIPTOR_SUFFIX,
        ignored_dirs: Optional[Iterable[str]] = None,
        hidden_prefix: str = Constants.HIDDEN_DIR_PREFIX,
    ):
        self.descriptor_file = descriptor_file
        self.descriptor_suffix = descriptor_suffix
        self.ignored_dirs = frozenset(Constants.IGNORED_DIRS if ignored_dirs is None else ignored_dirs)
        self.hidden_prefix = hidden_prefix

    def is_descriptor(self, path: Path) -> bool:
        name = path.name
        return name == self.descriptor_file or name.endswith(self.descriptor_suffix)

    def is_ignored(self, path: Path) -> bool:
        name = path.name
        return name.startswith(self.hidden_prefix) or name in self.ignored_dirs

    def should_descend(self, path: Path, recurse: bool) -> bool:
        """Only each root's own files are seen unless ``recurse`` is set."""
        return recurse and not self.is_ignored(path)

    def find_package_dirs(self, root: Path, recurse: bool) -> Set[Path]:
        """Return every directory at or below ``root`` that holds a descriptor."""
        files = find_files(
            Path(root),
            self.is_descriptor,
            lambda d: self.should_descend(d, recurse),
        )
        return {f.parent for f in files}

    def discover(
        self,
        roots: Iterable[Path],
        recurse: bool,
        loader: DirectoryLoader,
    ) -> List[DiscoveredPackage]:
        """Find and load every package below ``roots``.

        Args:
            roots: Search roots (absolute directories).
            recurse: Whether to look into subdirectories.
            loader: Descriptor loader for each package directory.

        Returns:
            Discovered packages sorted by descriptor path.

        Raises:
            PackageNameInvalid: listing every descriptor whose file name
                disagrees with its declared package name.
        """
        package_dirs: Set[Path] = set()
        for root in roots:
            package_dirs |= self.find_package_dirs(root, recurse)

        if not package_dirs:
            logger.warning(
                "No local directories containing a package descriptor were found. "
                "An empty project will be created."
            )
            return []

        logger.info(
            "Using the packages in:\n%s",
            "\n".join(f"  - {d}" for d in sorted(package_dirs)),
        )

        mismatches: List[Tuple[Path, str]] = []
        found: List[DiscoveredPackage] = []
        for directory in sorted(package_dirs):
            try:
                descriptor = loader.load_dir(directory)
            except DescriptorNameMismatch as exc:
                mismatches.append((exc.path, exc.name))
                continue
            ref = PackageDescriptorRef(path=descriptor.path, directory=directory)
            found.append(DiscoveredPackage(ref=ref, name=descriptor.name, descriptor=descriptor))

        if mismatches:
            raise PackageNameInvalid(mismatches)

        if is_debug_enabled(logger):
            logger.debug(
                "Discovered packages",
                extra=extra_context(
                    event="function_exit", component="discovery", action="discover",
                    count=len(found),
                ),
            )
        return sorted(found, key=lambda p: str(p.ref.path))
