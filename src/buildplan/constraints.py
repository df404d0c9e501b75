"""Version-range checks for dependency constraints.

Constraints use the descriptor range syntax (``>= 1.2 && < 2``,
``^>= 1.4.2``, ``== 2.*``, ``-any``, alternatives joined with ``||``)
and are evaluated with ``packaging`` specifiers.
"""
from __future__ import annotations

import logging
import re
from typing import List

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)

_CLAUSE_RE = re.compile(r"^(\^>=|>=|<=|==|>|<)?\s*([0-9][0-9.*]*)$")


def _clause_specifiers(clause: str) -> List[str]:
    clause = clause.strip()
    if clause in ("", "-any", "any"):
        return []
    match = _CLAUSE_RE.match(clause)
    if not match:
        raise InvalidSpecifier(clause)
    op, ver = match.group(1) or "==", match.group(2)
    if op == "^>=":
        parts = [int(p) for p in ver.split(".") if p.isdigit()]
        major = (parts + [0, 0])[:2]
        upper = f"{major[0]}.{major[1] + 1}"
        return [f">={ver}", f"<{upper}"]
    return [f"{op}{ver}"]


def satisfies(version: str, constraint: str) -> bool:
    """Return True when ``version`` is inside ``constraint``.

    Constraints that cannot be understood are treated as satisfied.
    """
    text = (constraint or "").strip()
    if not text or text in ("-any", "any"):
        return True
    if text == "-none":
        return False
    try:
        candidate = Version(version)
        for alternative in text.split("||"):
            clauses = alternative.replace("(", " ").replace(")", " ").split("&&")
            specs: List[str] = []
            for clause in clauses:
                specs.extend(_clause_specifiers(clause))
            if SpecifierSet(",".join(specs)).contains(candidate, prereleases=True):
                return True
        return False
    except (InvalidSpecifier, InvalidVersion) as exc:
        logger.debug("Treating unparseable constraint %r as satisfied: %s", constraint, exc)
        return True
