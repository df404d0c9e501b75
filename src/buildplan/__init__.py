"""Build-plan checking.

- models.py: the three-way check result (ok, partial, fail)
- constraints.py: version-range evaluation
- checker.py: the oracle protocol and the bundled snapshot checker
- index.py: package index lookups that make partial plans possible
"""

from .models import BuildPlanResult, DepError, PlanFail, PlanOk, PlanPartial  # noqa: F401
from .checker import BuildPlanOracle, SnapshotPlanChecker  # noqa: F401

__all__ = [
    "BuildPlanOracle",
    "BuildPlanResult",
    "DepError",
    "PlanFail",
    "PlanOk",
    "PlanPartial",
    "SnapshotPlanChecker",
]
