"""
Dense pairwise distance index over locatable stops.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from tourplan.geo import Point, haversine_km

logger = logging.getLogger(__name__)


class DistanceIndex:
    """
    Pairwise great-circle distances among a fixed set of stops.

    Each stop gets a dense index 0..n-1 in the order given; distances live in
    an n x n matrix addressed by those indices. The id -> index mapping is
    only consulted at the boundary (distance_between / index_of).
    """

    def __init__(self, points: Sequence[Tuple[str, Point]]):
        self._ids: List[str] = [stop_id for stop_id, _ in points]
        self._coords: List[Point] = [coord for _, coord in points]
        self._positions: Dict[str, int] = {}
        for pos, stop_id in enumerate(self._ids):
            if stop_id in self._positions:
                raise ValueError(f"Duplicate stop id in distance index: {stop_id!r}")
            self._positions[stop_id] = pos
        self._matrix = self._build_matrix(self._coords)
        logger.debug("Built distance index over %d stops", len(self._ids))

    @staticmethod
    def _build_matrix(coords: List[Point]) -> List[List[float]]:
        n = len(coords)
        matrix = [[0.0] * n for _ in range(n)]
        for i in range(n):
            for j in range(i + 1, n):
                dist_km = haversine_km(coords[i], coords[j])
                matrix[i][j] = dist_km
                matrix[j][i] = dist_km
        return matrix

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, stop_id: object) -> bool:
        return stop_id in self._positions

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def index_of(self, stop_id: str) -> Optional[int]:
        return self._positions.get(stop_id)

    def id_at(self, index: int) -> str:
        return self._ids[index]

    def coordinate(self, index: int) -> Point:
        return self._coords[index]

    def distance(self, i: int, j: int) -> float:
        """
        Distance in km between dense indices i and j.
        """
        return self._matrix[i][j]

    def distance_between(self, id_a: str, id_b: str) -> Optional[float]:
        """
        Distance in km between two stop ids, or None if either is not indexed.
        """
        i = self._positions.get(id_a)
        j = self._positions.get(id_b)
        if i is None or j is None:
            return None
        return self._matrix[i][j]

    def path_length(self, order: Sequence[int]) -> float:
        """
        Sum of consecutive distances along a sequence of dense indices.
        """
        return sum(self._matrix[a][b] for a, b in zip(order, order[1:]))
