"""
Execution statistics and order/fill detail extraction.
"""

from .calculator import ReductionState, StatsCalculator
from .order_details import OrderDetailExtractor

__all__ = ["StatsCalculator", "ReductionState", "OrderDetailExtractor"]
