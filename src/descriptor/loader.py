"""Package descriptor loading.

Two descriptor forms are recognized:
  - ``package.yaml``: the hand-written YAML form
  - ``<name>.cabal``: the generated form, whose file name must match the
    package it declares

Only the fields the initializer needs are read: the package name, the
dependency constraints and the default flag assignments. Anything else in
the file is left alone.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

import yaml

from constants import Constants
from errors import DescriptorError, DescriptorNameMismatch

logger = logging.getLogger(__name__)

_DEP_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9_\-]*)(?::[A-Za-z0-9_\-{}, ]+)?\s*(.*?)\s*$")
_FIELD_RE = re.compile(r"^(\s*)([A-Za-z][A-Za-z0-9\-]*)\s*:(.*)$")
# "pkg:sublib" or "pkg:{a, b}" inside a build-depends list, not a new field
_SUBLIB_DEP_RE = re.compile(r"^\s*,?\s*[A-Za-z0-9][A-Za-z0-9_\-]*:[A-Za-z0-9_{]")
_LIST_SEP_RE = re.compile(r",(?![^{]*\})")
_SECTION_RE = re.compile(
    r"^(\s*)(library|executable|test-suite|benchmark|flag|common|foreign-library|"
    r"source-repository|custom-setup)\b\s*(.*)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class PackageDescriptor:
    """What the initializer knows about one package."""
    name: str
    path: Path
    dependencies: Dict[str, str] = field(default_factory=dict)
    flags: Dict[str, bool] = field(default_factory=dict)


class DirectoryLoader(Protocol):
    """Anything able to load the descriptor of a package directory."""

    def load_dir(self, directory: Path) -> PackageDescriptor:
        ...


def _add_dependency(deps: Dict[str, str], name: str, constraint: str) -> None:
    constraint = constraint.strip()
    existing = deps.get(name)
    if not existing:
        deps[name] = constraint
    elif constraint and constraint != existing:
        deps[name] = f"({existing}) && ({constraint})"


def parse_dependency(text: str) -> Optional[tuple]:
    """Split ``"base >= 4.7 && < 5"`` into ``("base", ">= 4.7 && < 5")``."""
    match = _DEP_RE.match(text or "")
    if not match:
        return None
    return match.group(1), match.group(2)


class DescriptorLoader:
    """Load package descriptors from disk."""

    def __init__(
        self,
        descriptor_file: str = Constants.DESCRIPTOR_FILE,
        descriptor_suffix: str = Constants.DESCRIPTOR_SUFFIX,
    ):
        self.descriptor_file = descriptor_file
        self.descriptor_suffix = descriptor_suffix

    def load(self, path: Path) -> PackageDescriptor:
        """Load a descriptor file.

        Raises:
            DescriptorNameMismatch: the generated form is named after another package.
            DescriptorError: the file cannot be read or declares no name.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DescriptorError(path, f"cannot be read: {exc}") from exc
        if path.name == self.descriptor_file:
            return self._load_yaml(path, text)
        if path.name.endswith(self.descriptor_suffix):
            return self._load_generated(path, text)
        raise DescriptorError(path, "is not a recognized package descriptor")

    def load_dir(self, directory: Path) -> PackageDescriptor:
        """Load the descriptor of a package directory."""
        return self.load(descriptor_in_dir(directory, self.descriptor_file, self.descriptor_suffix))

    def _load_yaml(self, path: Path, text: str) -> PackageDescriptor:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise DescriptorError(path, f"is not valid YAML: {exc}") from exc
        if not isinstance(data, dict):
            raise DescriptorError(path, "must contain a mapping")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise DescriptorError(path, "does not declare a package name")

        deps: Dict[str, str] = {}
        for section in _yaml_sections(data):
            for dep_name, constraint in _yaml_dependencies(section.get("dependencies")):
                _add_dependency(deps, dep_name, constraint)

        flags: Dict[str, bool] = {}
        raw_flags = data.get("flags") or {}
        if isinstance(raw_flags, dict):
            for flag, spec in raw_flags.items():
                default = spec.get("default", True) if isinstance(spec, dict) else True
                flags[str(flag).lower()] = bool(default)

        return PackageDescriptor(name=name.strip(), path=path, dependencies=deps, flags=flags)

    def _load_generated(self, path: Path, text: str) -> PackageDescriptor:
        name: Optional[str] = None
        deps: Dict[str, str] = {}
        flags: Dict[str, bool] = {}
        current_flag: Optional[str] = None
        depends_indent: Optional[int] = None
        depends_text: List[str] = []

        def flush_depends():
            for item in _LIST_SEP_RE.split(" ".join(depends_text)):
                parsed = parse_dependency(item)
                if parsed:
                    _add_dependency(deps, parsed[0], parsed[1])
            depends_text.clear()

        for raw in text.splitlines():
            if not raw.strip() or raw.lstrip().startswith("--"):
                continue
            indent = len(raw) - len(raw.lstrip())

            if depends_indent is not None:
                if indent > depends_indent and (_SUBLIB_DEP_RE.match(raw) or not _FIELD_RE.match(raw)):
                    depends_text.append(raw.strip())
                    continue
                flush_depends()
                depends_indent = None

            section = _SECTION_RE.match(raw)
            if section and ":" not in raw.split()[0]:
                kind = section.group(2).lower()
                if indent == 0:
                    current_flag = section.group(3).strip().lower() if kind == "flag" else None
                    if current_flag:
                        flags.setdefault(current_flag, True)
                continue

            fld = _FIELD_RE.match(raw)
            if not fld:
                continue
            key, value = fld.group(2).lower(), fld.group(3).strip()
            if key == "name" and indent == 0 and name is None:
                name = value
            elif key == "default" and current_flag:
                flags[current_flag] = value.lower() == "true"
            elif key == "build-depends":
                depends_indent = indent
                if value:
                    depends_text.append(value)
        if depends_indent is not None:
            flush_depends()

        if not name:
            raise DescriptorError(path, "does not declare a package name")
        if path.name[: -len(self.descriptor_suffix)] != name:
            raise DescriptorNameMismatch(path, name)
        return PackageDescriptor(name=name, path=path, dependencies=deps, flags=flags)


def _yaml_sections(data: Dict[str, Any]) -> Iterable[Dict[str, Any]]:
    """Yield the top-level mapping and every component section."""
    yield data
    library = data.get("library")
    if isinstance(library, dict):
        yield library
    for key in ("executables", "tests", "benchmarks", "internal-libraries"):
        group = data.get(key)
        if isinstance(group, dict):
            for component in group.values():
                if isinstance(component, dict):
                    yield component


def _yaml_dependencies(raw: Any) -> Iterable[tuple]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    if isinstance(raw, dict):
        return [(str(k), "" if v is None else str(v)) for k, v in raw.items()]
    out = []
    for item in raw:
        parsed = parse_dependency(str(item))
        if parsed:
            out.append(parsed)
    return out


def descriptor_in_dir(
    directory: Path,
    descriptor_file: str = Constants.DESCRIPTOR_FILE,
    descriptor_suffix: str = Constants.DESCRIPTOR_SUFFIX,
) -> Path:
    """Pick the descriptor that defines the package in ``directory``.

    The hand-written form wins; otherwise exactly one generated file must exist.
    """
    directory = Path(directory)
    hand_written = directory / descriptor_file
    if hand_written.is_file():
        return hand_written
    generated = sorted(p for p in directory.glob(f"*{descriptor_suffix}") if p.is_file())
    if not generated:
        raise DescriptorError(directory, "contains no package descriptor")
    if len(generated) > 1:
        names = ", ".join(p.name for p in generated)
        raise DescriptorError(directory, f"contains multiple package descriptors: {names}")
    return generated[0]
