"""
Reporting utilities for optimized routes.
"""

from typing import Any, Dict, Optional


def format_distance(km: float) -> str:
    meters = round(km * 1000)
    if meters < 1000:
        return f"{meters} m"
    return f"{km:.1f} km"


def format_route(result: Dict[str, Any], stops_by_id: Optional[Dict[str, Dict[str, Any]]] = None) -> str:
    """
    Render a human-readable route summary.

    stops_by_id, when given, supplies titles for the listed stops.
    """
    stops_by_id = stops_by_id or {}
    leg_into = {leg["to_id"]: leg["distance_km"] for leg in result.get("legs", [])}
    unlocated = set(result.get("unlocated_ids", []))

    lines = []
    lines.append(f"Strategy: {result.get('strategy')}")
    for idx, stop_id in enumerate(result.get("ordered_ids", []), start=1):
        title = stops_by_id.get(stop_id, {}).get("title")
        label = f"{stop_id} ({title})" if title else str(stop_id)
        if stop_id in unlocated:
            lines.append(f"  {idx}. {label} - no location")
        elif stop_id in leg_into:
            lines.append(f"  {idx}. {label} +{format_distance(leg_into[stop_id])}")
        else:
            lines.append(f"  {idx}. {label}")
    lines.append(f"Total distance: {format_distance(result.get('total_distance_km', 0.0))}")
    if unlocated:
        lines.append(f"{len(unlocated)} stop(s) have no location and were placed at the end")
    return "\n".join(lines)
