"""Exception types.

Three families:
  - ``FactoryError``: a single production strategy does not apply. The
    resolver catches these; they never reach solver callers.
  - ``SolverError``: a solve failed. Raised to the caller.
  - ``DataLoadError``: malformed catalog/site/operator data at load time.

``ProductNotFound`` belongs to the first family but is also what ``solve``
raises for an unknown target.
"""
from __future__ import annotations

from typing import Iterable, Optional


class PlannerError(Exception):
    """Base class for every error raised by piplanner."""


class FactoryError(PlannerError, ValueError):
    pass


class ProductNotFound(FactoryError, KeyError):
    def __init__(self, product: str):
        self.product = product
        super().__init__(f"Product not found: {product}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class InvalidProductTier(FactoryError):
    def __init__(self, product: str, expected, actual):
        self.product = product
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Product {product} has incorrect tier: expected {expected}, got {actual}"
        )


class MissingIngredients(FactoryError):
    def __init__(self, product: str, missing: Iterable[str]):
        self.product = product
        self.missing = sorted(missing)
        super().__init__(f"Product {product} is missing ingredients: {self.missing}")


class RequiresMining(FactoryError):
    def __init__(self, product: str):
        self.product = product
        super().__init__(f"Product {product} requires local extraction")


class DoesNotRequireMining(FactoryError):
    def __init__(self, product: str):
        self.product = product
        super().__init__(f"Product {product} does not require local extraction")


class NoMinableResource(FactoryError):
    def __init__(self, product: Optional[str] = None):
        self.product = product
        where = f" for {product}" if product else ""
        super().__init__(f"No minable resource found in the production chain{where}")


class InputOutputMismatch(FactoryError):
    def __init__(self, inputs: int, outputs: int):
        self.inputs = inputs
        self.outputs = outputs
        super().__init__(
            f"Number of inputs ({inputs}) does not match number of outputs ({outputs})"
        )


class PlanetCannotMine(FactoryError):
    def __init__(self, site_type, resource: str):
        self.site_type = site_type
        self.resource = resource
        super().__init__(f"Site type {site_type} cannot mine resource {resource}")


class SolverError(PlannerError):
    pass


class NoSolutionFound(SolverError):
    def __init__(self, product: str, reason: Optional[str] = None):
        self.product = product
        self.reason = reason
        msg = f"No solution found for {product}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class DataLoadError(PlannerError, ValueError):
    pass


__all__ = [
    "PlannerError",
    "FactoryError",
    "ProductNotFound",
    "InvalidProductTier",
    "MissingIngredients",
    "RequiresMining",
    "DoesNotRequireMining",
    "NoMinableResource",
    "InputOutputMismatch",
    "PlanetCannotMine",
    "SolverError",
    "NoSolutionFound",
    "DataLoadError",
]
