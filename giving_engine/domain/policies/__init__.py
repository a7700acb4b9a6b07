"""Domain policies package."""

from .categories import InactiveCategoryPolicy, is_valid_category_name
from .growth import ZeroGrowthPolicy, compute_growth

__all__ = [
    "InactiveCategoryPolicy",
    "is_valid_category_name",
    "ZeroGrowthPolicy",
    "compute_growth",
]
