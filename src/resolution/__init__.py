"""Snapshot selection and package-set convergence."""

from .options import InitOptions  # noqa: F401
from .resolver import ConvergenceResolver, ResolvedPlan  # noqa: F401

__all__ = ["ConvergenceResolver", "InitOptions", "ResolvedPlan"]
