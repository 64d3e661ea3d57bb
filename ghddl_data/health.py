# ghddl_data/health.py

"""
Smoke checks run after acquisition to prove the numerical stack is usable.
"""
from typing import Callable, List, Optional

import numpy as np

HealthCheck = Callable[[], None]

HEALTH_CHECKS: List[HealthCheck] = []


def register_check(check: HealthCheck) -> HealthCheck:
    """Decorator adding a check to the default registry."""
    HEALTH_CHECKS.append(check)
    return check


@register_check
def check_numpy() -> None:
    """Builds a random 10x10 matrix, the same sanity check a tensor library would get."""
    weights = np.random.default_rng(42).standard_normal((10, 10))
    if weights.shape != (10, 10) or not np.isfinite(weights).all():
        raise RuntimeError("numpy produced an unexpected random matrix.")


def run_health_checks(checks: Optional[List[HealthCheck]] = None) -> None:
    """
    Runs each check in order. The first failing check stops the run.

    Raises:
        RuntimeError: Wrapping whatever the failing check raised.
    """
    checks = HEALTH_CHECKS if checks is None else checks
    for check in checks:
        print(f"Running health check: {check.__name__}")
        try:
            check()
        except Exception as e:
            raise RuntimeError(f"Health check '{check.__name__}' failed: {e}") from e
