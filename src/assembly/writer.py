"""Render and write the project configuration file.

Each section is serialised on its own with ``yaml.safe_dump`` and preceded by
a help comment. Optional sections that have no value are written as
commented placeholders so users can see where to put them.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional

import yaml

from assembly.assembler import ProjectConfigDraft

logger = logging.getLogger(__name__)


def _comment(lines: List[str]) -> str:
    return "\n".join("#" if not line else f"# {line}" for line in lines)


HEADER_HELP = _comment([
    "This file was automatically generated by 'snapinit'.",
    "",
    "Some commonly used options have been documented as comments in this file.",
])

SECTION_HELP = {
    "user-message": _comment([
        "A warning or info to be displayed to the user on config load.",
    ]),
    "snapshot": _comment([
        "A specific snapshot or a compiler version.",
        "A snapshot dictates the compiler version and the set of packages",
        "to be used for project dependencies. For example:",
        "",
        "snapshot: lts-22.28",
        "snapshot: nightly-2024-07-05",
        "snapshot: ghc-9.6.6",
        "",
        "The location of a snapshot can be provided as a file or url.",
        "",
        "snapshot: ./custom-snapshot.yaml",
        "snapshot: https://example.com/snapshots/2024-01-01.yaml",
    ]),
    "packages": _comment([
        "User packages to be built.",
        "",
        "packages:",
        "- some-directory",
    ]),
    "extra-deps": _comment([
        "Dependency packages to be pulled from upstream that are not in the snapshot.",
        "For example:",
        "",
        "extra-deps:",
        "- acme-missiles-0.3",
    ]),
    "flags": _comment([
        "Override default flag values for project packages and extra-deps",
    ]),
}

FOOTER_HELP = _comment([
    "Control whether the compiler found on the path is used",
    "system-ghc: true",
    "",
    "Extra directories used for building",
    "extra-include-dirs: [/path/to/dir]",
    "extra-lib-dirs: [/path/to/dir]",
])

PLACEHOLDERS = {
    "extra-deps": "# extra-deps: []\n",
    "flags": "# flags: {}\n",
}

IGNORED_HELP = _comment([
    "The following packages have been ignored due to incompatibility with the",
    "snapshot compiler, dependency conflicts with other packages",
    "or unsatisfied dependencies.",
])

DUPLICATES_HELP = _comment([
    "The following packages have been ignored due to package name conflict",
    "with other packages.",
])


def _dump(name: str, value: Any) -> str:
    return yaml.safe_dump({name: value}, default_flow_style=False, sort_keys=False)


def _section_value(name: str, draft: ProjectConfigDraft) -> Optional[str]:
    if name == "user-message":
        return _dump(name, draft.user_message) if draft.user_message is not None else None
    if name == "snapshot":
        return _dump(name, str(draft.snapshot))
    if name == "packages":
        return _dump(name, list(draft.packages))
    if name == "extra-deps" and draft.extra_deps:
        return _dump(name, list(draft.extra_deps))
    if name == "flags" and draft.flags:
        return _dump(name, {pkg: dict(values) for pkg, values in draft.flags.items()})
    return PLACEHOLDERS.get(name)


def _commented_paths(help_text: str, paths: List[str]) -> str:
    if not paths:
        return ""
    return help_text + "\n" + "".join(f"#- {p}\n" for p in paths) + "\n"


def render_config(draft: ProjectConfigDraft) -> str:
    """Render ``draft`` as a commented YAML document."""
    parts = [HEADER_HELP, "\n\n"]
    for name, help_text in SECTION_HELP.items():
        value = _section_value(name, draft)
        if value is None:
            continue
        parts.append(help_text + "\n" + value)
        if name == "packages":
            parts.append(_commented_paths(IGNORED_HELP, draft.diagnostics.incompatible))
            parts.append(_commented_paths(DUPLICATES_HELP, draft.diagnostics.duplicates))
        parts.append("\n")
    parts.append(FOOTER_HELP + "\n")
    return "".join(parts)


def write_config(dest: Path, draft: ProjectConfigDraft) -> Path:
    """Atomically write the rendered ``draft`` to ``dest``."""
    dest = Path(dest)
    text = render_config(draft)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", dir=str(dest.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_name, dest)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
    logger.debug("Wrote %d bytes to %s", len(text), dest)
    return dest
