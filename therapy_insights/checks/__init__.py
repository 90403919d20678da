"""Check package that ensures registration on import."""
from __future__ import annotations

from importlib import import_module

_MODULES = [
    "low_glucose",
    "overnight",
    "meal_spike",
    "general_high",
    "correction_factor",
]

# Import checks in evaluation order to trigger registration side-effects.
for _module in _MODULES:
    import_module(f"{__name__}.{_module}")

__all__ = list(_MODULES)
