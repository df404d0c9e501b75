"""Shared fixtures for the snapinit test suite."""

from pathlib import Path

import pytest

from common import http_client


def write_package(directory: Path, name: str, dependencies=None, flags=None) -> Path:
    """Create ``directory/package.yaml`` declaring ``name``."""
    directory.mkdir(parents=True, exist_ok=True)
    lines = [f"name: {name}", "version: 0.1.0"]
    if dependencies:
        lines.append("dependencies:")
        lines.extend(f"- {dep}" for dep in dependencies)
    if flags:
        lines.append("flags:")
        for flag, default in flags.items():
            lines.append(f"  {flag}:")
            lines.append("    manual: false")
            lines.append(f"    default: {'true' if default else 'false'}")
    path = directory / "package.yaml"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clear_http_cache():
    """Responses cached by one test must not leak into another."""
    http_client.clear_cache()
    yield
    http_client.clear_cache()
