"""
Domain exceptions.

Expected degradations (generator mismatches, exhausted placement budgets,
lookup misses) are reported as diagnostics or ``None``; only malformed input
raises.
"""
from typing import Optional


class LayoutValidationError(ValueError):
    """Raised when layout input is malformed (negative or non-finite geometry)."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class BlueprintConflictError(ValueError):
    """Raised when a published (id, version) pair would be redefined."""

    def __init__(self, blueprint_id: str, version: int):
        super().__init__(
            f"Blueprint '{blueprint_id}' v{version} is already published with a different definition"
        )
        self.blueprint_id = blueprint_id
        self.version = version
