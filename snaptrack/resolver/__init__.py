"""Resolver — восстановление composite-состояния портфеля по снапшотам.

- Carry-forward на уровне платформ (не отдельных активов)
- Batch resolution за один линейный проход
- Single-snapshot resolution, идентичная batch-результату
"""

from .carry_forward import (
    CarryForwardResolver,
    ResolverConfig,
    StructuralInvariantViolation,
    composite_total,
    resolve,
    resolve_all,
)

__all__ = [
    "CarryForwardResolver",
    "ResolverConfig",
    "StructuralInvariantViolation",
    "composite_total",
    "resolve",
    "resolve_all",
]
