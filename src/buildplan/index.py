"""Package index lookups for dependencies outside a snapshot."""

from __future__ import annotations

import logging
import urllib.parse
from typing import Dict, List, Optional, Tuple

from packaging.version import InvalidVersion, Version

from buildplan.constraints import satisfies
from common.http_client import get_json
from constants import Constants

logger = logging.getLogger(__name__)


class PackageIndex:
    """Find the newest published version of a package matching a constraint.

    The index answers ``GET <template with {name}>`` with a JSON object whose
    ``normal-version`` list holds the preferred versions.
    """

    def __init__(self, url_template: str = Constants.PACKAGE_INDEX_URL_TEMPLATE):
        self.url_template = url_template
        self._versions: Dict[str, List[str]] = {}

    def versions(self, name: str) -> List[str]:
        if name not in self._versions:
            url = self.url_template.format(name=urllib.parse.quote(name, safe=""))
            status_code, _, data = get_json(url, headers={"Accept": "application/json"})
            found: List[str] = []
            if status_code == 200 and isinstance(data, dict):
                found = [str(v) for v in data.get("normal-version") or []]
            else:
                logger.debug("No index versions for %s (status %s)", name, status_code)
            self._versions[name] = found
        return self._versions[name]

    def __call__(self, name: str, constraint: str) -> Optional[str]:
        parsed: List[Tuple[Version, str]] = []
        for raw in self.versions(name):
            try:
                parsed.append((Version(raw), raw))
            except InvalidVersion:
                continue
        for _, raw in sorted(parsed, reverse=True):
            if satisfies(raw, constraint):
                return raw
        return None
