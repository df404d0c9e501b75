"""Package discovery.

This package provides the filesystem side of project initialization:
- walker.py: predicate-driven walk that never follows symlinked directories
- ancestors.py: upward searches from a starting directory
- packages.py: descriptor discovery and name-mismatch checking
- dedupe.py: one canonical package per declared name
"""
