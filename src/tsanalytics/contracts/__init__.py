"""Parameter contracts for tsanalytics operations."""

from tsanalytics.contracts.specs import BaseSpec, GridSpec, ResampleSpec, WindowSpec

__all__ = [
    "BaseSpec",
    "GridSpec",
    "ResampleSpec",
    "WindowSpec",
]
