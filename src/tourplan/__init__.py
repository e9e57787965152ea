"""
Itinerary route optimization: order geotagged stops into a short visiting tour.
"""

from tourplan.data import DuplicateStopIdError
from tourplan.solver import optimize_route

__all__ = ["DuplicateStopIdError", "optimize_route"]
