"""
Route construction for itinerary stops: nearest-neighbor tours with optional
2-opt or OR-Tools refinement.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ortools.constraint_solver import pywrapcp, routing_enums_pb2

from tourplan.data import split_stops
from tourplan.matrix import DistanceIndex

logger = logging.getLogger(__name__)

NEAREST_NEIGHBOR = "nearest_neighbor"
TWO_OPT = "two_opt"
ORTOOLS = "ortools"
STRATEGIES = (NEAREST_NEIGHBOR, TWO_OPT, ORTOOLS)

# Minimum gain (km) for a 2-opt move; keeps float noise from cycling.
_IMPROVEMENT_EPS = 1e-9


def _nearest_neighbor_order(index: DistanceIndex) -> List[int]:
    n = len(index)
    if n <= 1:
        return list(range(n))
    current = 0
    order = [current]
    # Kept in input order so ties resolve to the earliest stop.
    unvisited = list(range(1, n))
    while unvisited:
        best_pos = 0
        best_dist = index.distance(current, unvisited[0])
        for pos in range(1, len(unvisited)):
            dist = index.distance(current, unvisited[pos])
            if dist < best_dist:
                best_pos = pos
                best_dist = dist
        current = unvisited.pop(best_pos)
        order.append(current)
    return order


def nearest_neighbor_tour(index: DistanceIndex) -> Tuple[List[str], float]:
    """
    Greedy tour starting at the first indexed stop.

    Each step moves to the closest unvisited stop; exact ties go to the stop
    that came first in the input. Returns (stop ids, total distance km).
    """
    order = _nearest_neighbor_order(index)
    return [index.id_at(i) for i in order], index.path_length(order)


def _two_opt_order(index: DistanceIndex, order: List[int]) -> List[int]:
    """
    Improve an open path with 2-opt moves, keeping order[0] in place.
    """
    order = list(order)
    n = len(order)
    if n < 3:
        return order
    dist = index.distance
    improved = True
    while improved:
        improved = False
        for i in range(1, n - 1):
            for k in range(i + 1, n):
                a, b = order[i - 1], order[i]
                c = order[k]
                before = dist(a, b)
                after = dist(a, c)
                if k + 1 < n:
                    d = order[k + 1]
                    before += dist(c, d)
                    after += dist(b, d)
                if after + _IMPROVEMENT_EPS < before:
                    order[i:k + 1] = reversed(order[i:k + 1])
                    improved = True
                    break
            if improved:
                break
    return order


def two_opt_tour(index: DistanceIndex) -> Tuple[List[str], float]:
    """
    Nearest-neighbor tour refined with 2-opt; never longer than the greedy tour.
    """
    order = _two_opt_order(index, _nearest_neighbor_order(index))
    return [index.id_at(i) for i in order], index.path_length(order)


def _ortools_order(index: DistanceIndex, max_solve_seconds: int) -> Optional[List[int]]:
    """
    Solve the open path with OR-Tools, start fixed at dense index 0.

    A dummy end node (index n) is reachable from every stop at zero cost, so
    the route may finish anywhere.
    """
    n = len(index)
    dummy_end = n
    # Routing costs must be integers; use meters.
    meters = [[int(round(index.distance(i, j) * 1000)) for j in range(n)] for i in range(n)]

    manager = pywrapcp.RoutingIndexManager(n + 1, 1, [0], [dummy_end])
    routing = pywrapcp.RoutingModel(manager)

    def distance_callback(from_index: int, to_index: int) -> int:
        f = manager.IndexToNode(from_index)
        t = manager.IndexToNode(to_index)
        if f == dummy_end or t == dummy_end:
            return 0
        return meters[f][t]

    transit_callback_index = routing.RegisterTransitCallback(distance_callback)
    routing.SetArcCostEvaluatorOfAllVehicles(transit_callback_index)

    search_parameters = pywrapcp.DefaultRoutingSearchParameters()
    search_parameters.first_solution_strategy = routing_enums_pb2.FirstSolutionStrategy.PATH_CHEAPEST_ARC
    search_parameters.local_search_metaheuristic = routing_enums_pb2.LocalSearchMetaheuristic.GREEDY_DESCENT
    search_parameters.time_limit.FromSeconds(max(1, int(max_solve_seconds)))
    search_parameters.log_search = False

    solution = routing.SolveWithParameters(search_parameters)
    if not solution:
        return None

    order: List[int] = []
    node = routing.Start(0)
    while not routing.IsEnd(node):
        order.append(manager.IndexToNode(node))
        node = solution.Value(routing.NextVar(node))
    return order


def ortools_tour(index: DistanceIndex, max_solve_seconds: int = 5) -> Optional[Tuple[List[str], float]]:
    """
    Open-path tour from OR-Tools' routing solver, or None when it finds none.
    """
    if len(index) <= 2:
        return nearest_neighbor_tour(index)
    order = _ortools_order(index, max_solve_seconds)
    if order is None:
        return None
    return [index.id_at(i) for i in order], index.path_length(order)


def _legs(index: DistanceIndex, tour_ids: List[str]) -> List[Dict[str, Any]]:
    legs = []
    for from_id, to_id in zip(tour_ids, tour_ids[1:]):
        legs.append(
            {
                "from_id": from_id,
                "to_id": to_id,
                "distance_km": float(index.distance_between(from_id, to_id)),
            }
        )
    return legs


def optimize_route(
    stops: List[Dict[str, Any]],
    strategy: str = NEAREST_NEIGHBOR,
    max_solve_seconds: int = 5,
) -> Dict[str, Any]:
    """
    Order itinerary stops to shorten total great-circle travel.

    Stops without a usable coordinate are appended after the tour in their
    original order and also reported in "unlocated_ids". The first locatable
    stop always stays first.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}")

    locatable, unlocated = split_stops(stops)
    if unlocated:
        logger.warning("%d stop(s) have no location and will be placed at the end", len(unlocated))

    used_strategy = strategy
    if len(locatable) <= 1:
        tour_ids = [stop_id for stop_id, _ in locatable]
        total_km = 0.0
        legs: List[Dict[str, Any]] = []
    else:
        index = DistanceIndex(locatable)
        if strategy == TWO_OPT:
            tour_ids, total_km = two_opt_tour(index)
        elif strategy == ORTOOLS:
            solved = ortools_tour(index, max_solve_seconds=max_solve_seconds)
            if solved is None:
                logger.warning("OR-Tools found no route for %d stops; using nearest neighbor", len(index))
                used_strategy = NEAREST_NEIGHBOR
                solved = nearest_neighbor_tour(index)
            tour_ids, total_km = solved
        else:
            tour_ids, total_km = nearest_neighbor_tour(index)
        legs = _legs(index, tour_ids)

    logger.debug(
        "Optimized %d stops with %s: %.3f km, %d unlocated",
        len(stops),
        used_strategy,
        total_km,
        len(unlocated),
    )
    return {
        "status": "success",
        "strategy": used_strategy,
        "ordered_ids": tour_ids + unlocated,
        "total_distance_km": float(total_km),
        "unlocated_ids": unlocated,
        "legs": legs,
    }
