import pytest

from tourplan.server import create_app

STOPS = [
    {"id": "nyc", "lat": 40.7128, "lon": -74.0060},
    {"id": "bos", "lat": 42.3601, "lon": -71.0589},
    {"id": "cafe"},
    {"id": "phl", "lat": 39.9526, "lon": -75.1652},
]


@pytest.fixture
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


def test_optimize_endpoint(client):
    resp = client.post("/api/optimize", json={"stops": STOPS})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "success"
    assert body["ordered_ids"] == ["nyc", "phl", "bos", "cafe"]
    assert body["unlocated_ids"] == ["cafe"]


def test_optimize_endpoint_two_opt(client):
    resp = client.post("/api/optimize", json={"stops": STOPS, "strategy": "two_opt"})
    assert resp.status_code == 200
    assert resp.get_json()["strategy"] == "two_opt"


def test_optimize_endpoint_rejects_bad_input(client):
    assert client.post("/api/optimize", json={"stops": "nope"}).status_code == 400
    dup = client.post("/api/optimize", json={"stops": [{"id": "a"}, {"id": "a"}]})
    assert dup.status_code == 400
    assert dup.get_json()["status"] == "error"
    bad_strategy = client.post("/api/optimize", json={"stops": STOPS, "strategy": "magic"})
    assert bad_strategy.status_code == 400


def test_demo_stops_endpoint(client):
    resp = client.get("/api/stops?count=7&seed=3")
    assert resp.status_code == 200
    assert len(resp.get_json()["stops"]) == 7


def test_itinerary_optimize_flow(client):
    created = client.post("/api/itineraries", json={"id": "trip", "name": "East coast", "items": STOPS})
    assert created.status_code == 201
    assert [it["id"] for it in created.get_json()["items"]] == ["nyc", "bos", "cafe", "phl"]

    resp = client.post("/api/itineraries/trip/optimize", json={})
    assert resp.status_code == 200
    assert resp.get_json()["ordered_ids"] == ["nyc", "phl", "bos", "cafe"]
    assert "placed at the end" in resp.get_json()["summary"]

    stored = client.get("/api/itineraries/trip").get_json()
    assert [it["id"] for it in stored["items"]] == ["nyc", "phl", "bos", "cafe"]


def test_unknown_itinerary_is_404(client):
    assert client.get("/api/itineraries/missing").status_code == 404
    assert client.post("/api/itineraries/missing/optimize", json={}).status_code == 404


def test_manual_reorder(client):
    client.post("/api/itineraries", json={"id": "trip", "items": STOPS})
    resp = client.put("/api/itineraries/trip/order", json={"item_ids": ["cafe", "phl", "bos", "nyc"]})
    assert resp.status_code == 200
    assert [it["id"] for it in resp.get_json()["items"]] == ["cafe", "phl", "bos", "nyc"]


def test_manual_reorder_mismatch_is_409(client):
    client.post("/api/itineraries", json={"id": "trip", "items": STOPS})
    resp = client.put("/api/itineraries/trip/order", json={"item_ids": ["cafe", "phl"]})
    assert resp.status_code == 409
    assert resp.get_json()["status"] == "error"


def test_create_existing_itinerary_is_409_and_keeps_items(client):
    client.post("/api/itineraries", json={"id": "t", "items": [{"id": "a"}]})
    resp = client.post("/api/itineraries", json={"id": "t", "items": [{"id": "x"}, {"id": "x"}]})
    assert resp.status_code == 409
    stored = client.get("/api/itineraries/t").get_json()
    assert [it["id"] for it in stored["items"]] == ["a"]


def test_create_with_duplicate_items_writes_nothing(client):
    resp = client.post("/api/itineraries", json={"id": "t", "items": [{"id": "x"}, {"id": "x"}]})
    assert resp.status_code == 400
    assert client.get("/api/itineraries/t").status_code == 404


def test_null_solver_options_use_defaults(client):
    resp = client.post("/api/optimize", json={"stops": STOPS, "strategy": None, "max_solve_seconds": None})
    assert resp.status_code == 200
    assert resp.get_json()["strategy"] == "nearest_neighbor"
