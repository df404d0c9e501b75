"""Failure taxonomy for project initialization.

Every abort path of a resolution run raises a subclass of ``InitFailure``.
Each carries the exit code the CLI should use and the structured payload
(offending paths, snapshot names, failure descriptions) needed to render a
precise diagnostic. Degrading to an empty configuration is not an error and
has no exception here; see ``resolution.resolver.ResolvedPlan``.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

from constants import ExitCodes


class InitFailure(Exception):
    """Base class for failures that abort a resolution run."""

    exit_code = ExitCodes.RESOLUTION_ERROR


class ConfigError(InitFailure):
    """Raised when a user configuration file cannot be loaded or validated."""

    exit_code = ExitCodes.CONFIG_ERROR


class ConfigFileAlreadyExists(InitFailure):
    """The project configuration file exists and overwriting was not requested."""

    exit_code = ExitCodes.FILE_ERROR

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"The file {path} already exists. To overwrite it, pass the flag --force."
        )


class DescriptorError(InitFailure):
    """A package descriptor could not be read or is malformed."""

    exit_code = ExitCodes.FILE_ERROR

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class DescriptorNameMismatch(DescriptorError):
    """The descriptor file name does not match the package name it declares."""

    def __init__(self, path: Path, name: str):
        self.name = name
        super().__init__(path, f"declares package '{name}' but the file is named '{path.name}'")


class PackageNameInvalid(InitFailure):
    """One or more descriptors disagree with their declared package names."""

    exit_code = ExitCodes.FILE_ERROR

    def __init__(self, mismatches: Sequence[Tuple[Path, str]]):
        self.mismatches: List[Tuple[Path, str]] = list(mismatches)
        lines = [f"  {path} as {name}.cabal" for path, name in self.mismatches]
        super().__init__(
            "Descriptor file names must match the package they define. "
            "Please rename the following files:\n" + "\n".join(lines)
        )


class SnapshotSourceUnavailable(InitFailure):
    """Snapshot information (the index or a snapshot's contents) could not be retrieved."""

    exit_code = ExitCodes.CONNECTION_ERROR

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(f"Unable to load snapshot information: {cause}")


class NoMatchingSnapshot(InitFailure):
    """None of the candidate snapshots can build the packages."""

    def __init__(self, tried: Sequence[object]):
        self.tried = list(tried)
        names = "\n".join(f"  - {name}" for name in self.tried)
        super().__init__(
            "None of the following snapshots provides a build plan matching your package(s):\n"
            + names
            + "\nUse --omit-packages to exclude mismatching packages, "
            "or --snapshot to specify a matching snapshot."
        )


class PlanFailure(InitFailure):
    """The build-plan check failed and incompatible packages may not be omitted."""

    def __init__(self, snapshot: object, description: str):
        self.snapshot = snapshot
        self.description = description
        super().__init__(
            f"Snapshot {snapshot} cannot build some or all of your package(s).\n"
            f"{description}\n"
            "Use --omit-packages to exclude mismatching packages, "
            "or --snapshot to specify a matching snapshot."
        )


class InvariantViolation(InitFailure):
    """Internal logic error; indicates a bug rather than a user problem."""

    exit_code = ExitCodes.INTERNAL_ERROR
