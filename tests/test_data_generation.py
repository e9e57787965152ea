import math

import pytest

from tourplan.data import DuplicateStopIdError, coordinate_of, generate_stops, normalize_stops, split_stops
from tourplan.geo import haversine_km


def test_generate_stops_reproducible_with_seed():
    stops1 = generate_stops(seed=99, n=5)
    stops2 = generate_stops(seed=99, n=5)
    assert stops1 == stops2


def test_generate_stops_within_radius():
    center = (10.3157, 123.8854)
    stops = generate_stops(seed=1, n=50, center=center, radius_km=20, missing_ratio=0.0)
    assert len(stops) == 50
    for s in stops:
        assert haversine_km(center, (s["lat"], s["lon"])) <= 20.01


def test_generate_stops_has_unique_ids_and_some_missing():
    stops = generate_stops(seed=5, n=40, missing_ratio=0.3)
    ids = [s["id"] for s in stops]
    assert len(set(ids)) == len(ids)
    missing = [s for s in stops if s["lat"] is None]
    assert 0 < len(missing) < len(stops)


def test_normalize_accepts_latitude_longitude_keys():
    stops = [
        {"id": "a", "latitude": 40.0, "longitude": -74.0, "title": "A"},
        {"id": "b", "lat": 41.0, "lon": -73.0},
    ]
    normalized = normalize_stops(stops)
    assert normalized[0] == {"id": "a", "lat": 40.0, "lon": -74.0, "index": 0}
    assert normalized[1]["lat"] == 41.0
    assert normalized[1]["index"] == 1


def test_normalize_marks_invalid_coordinates_as_missing():
    stops = [
        {"id": "nan", "lat": math.nan, "lon": 1.0},
        {"id": "range", "lat": 91.0, "lon": 1.0},
        {"id": "half", "lat": 10.0},
        {"id": "text", "lat": "10", "lon": "20"},
    ]
    for s in normalize_stops(stops):
        assert s["lat"] is None and s["lon"] is None


def test_zero_coordinates_are_locatable():
    locatable, unlocated = split_stops([{"id": "gulf", "lat": 0.0, "lon": 0.0}])
    assert locatable == [("gulf", (0.0, 0.0))]
    assert unlocated == []


def test_split_stops_preserves_relative_order():
    stops = [
        {"id": "1", "lat": None, "lon": None},
        {"id": "2", "lat": 1.0, "lon": 1.0},
        {"id": "3"},
        {"id": "4", "lat": 2.0, "lon": 2.0},
    ]
    locatable, unlocated = split_stops(stops)
    assert [sid for sid, _ in locatable] == ["2", "4"]
    assert unlocated == ["1", "3"]


def test_duplicate_ids_rejected():
    with pytest.raises(DuplicateStopIdError) as exc_info:
        normalize_stops([{"id": "x", "lat": 1.0, "lon": 1.0}, {"id": "x"}])
    assert exc_info.value.stop_id == "x"


def test_missing_id_rejected():
    with pytest.raises(ValueError):
        normalize_stops([{"lat": 1.0, "lon": 1.0}])


def test_coordinate_of():
    assert coordinate_of({"id": "a", "latitude": 1, "longitude": 2}) == (1.0, 2.0)
    assert coordinate_of({"id": "a"}) is None
