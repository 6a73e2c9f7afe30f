from layoutgen.generation import GenerationConfig
from layoutgen.routes.layout_api import coerce_seed, create_run, get_run
from tests.layout_test_utils import FakePhysicsWorld, FakeTriangulator


def test_create_layout_defaults(client):
    resp = client.post("/api/layouts", json={"seed": 42, "room_threshold": 10})
    assert resp.status_code == 201
    data = resp.get_json()
    assert data["seed"] == 42
    assert data["state"]["phase"] == "scattering"
    assert data["state"]["rooms"] == []
    assert get_run(data["id"]) is not None


def test_create_layout_string_seed_is_stable(client):
    a = client.post("/api/layouts", json={"seed": "crypt-of-bones"}).get_json()
    b = client.post("/api/layouts", json={"seed": "crypt-of-bones"}).get_json()
    assert a["seed"] == b["seed"]
    assert a["id"] != b["id"]
    assert client.post("/api/layouts", json={"seed": "123"}).get_json()["seed"] == 123


def test_create_layout_without_body(client):
    resp = client.post("/api/layouts")
    assert resp.status_code == 201
    assert isinstance(resp.get_json()["seed"], int)


def test_create_layout_rejects_bad_fields(client):
    resp = client.post("/api/layouts", json={"room_threshold": -1})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["field"] == "room_threshold"
    assert body["code"] == "min"
    resp = client.post("/api/layouts", json={"interactive": "yes"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "type"


def test_unknown_layout_is_404(client):
    for method, path in [
        ("get", "/api/layouts/nope"),
        ("post", "/api/layouts/nope/tick"),
        ("post", "/api/layouts/nope/confirm"),
        ("post", "/api/layouts/nope/run"),
        ("get", "/api/layouts/nope/metrics"),
    ]:
        resp = getattr(client, method)(path)
        assert resp.status_code == 404
        assert resp.get_json()["code"] == "not_found"


def test_tick_advances_run(client, fake_run):
    run = fake_run()
    resp = client.post(f"/api/layouts/{run.id}/tick", json={"ticks": 3})
    assert resp.status_code == 200
    state = resp.get_json()
    assert state["tick"] == 3
    assert len(state["rooms"]) == 3
    state = client.post(f"/api/layouts/{run.id}/tick", json={"ticks": 1000}).get_json()
    assert state["done"] is True
    assert state["tick"] == 17
    assert client.get(f"/api/layouts/{run.id}").get_json()["phase"] == "done"


def test_tick_validation(client, fake_run):
    run = fake_run()
    assert client.post(f"/api/layouts/{run.id}/tick", json={"ticks": 0}).status_code == 400
    assert client.post(f"/api/layouts/{run.id}/tick", json={"ticks": "many"}).status_code == 400
    assert client.post(f"/api/layouts/{run.id}/tick", json={"ticks": 5000}).get_json()["code"] == "max"


def test_interactive_run_stops_at_gate_until_confirmed(client, fake_run):
    run = fake_run(interactive=True)
    state = client.post(f"/api/layouts/{run.id}/tick", json={"ticks": 1000}).get_json()
    assert state["phase"] == "await_confirm_1"
    assert state["awaiting_confirmation"] is True
    # more ticks do not pass the gate
    state = client.post(f"/api/layouts/{run.id}/tick", json={"ticks": 10}).get_json()
    assert state["phase"] == "await_confirm_1"
    resp = client.post(f"/api/layouts/{run.id}/confirm")
    assert resp.status_code == 200
    assert resp.get_json()["phase"] == "settling"


def test_confirm_outside_gate_is_conflict(client, fake_run):
    run = fake_run(interactive=True)
    resp = client.post(f"/api/layouts/{run.id}/confirm")
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "not_awaiting"
    assert run.orchestrator.confirm_pending is False


def test_run_to_completion_passes_gates(client, fake_run):
    run = fake_run(interactive=True)
    resp = client.post(f"/api/layouts/{run.id}/run")
    assert resp.status_code == 200
    state = resp.get_json()
    assert state["done"] is True
    assert state["selected_room_ids"] == [r["id"] for r in state["rooms"]]
    assert state["spanning_tree"] is not None


def test_metrics_endpoint(client, fake_run):
    run = fake_run()
    client.post(f"/api/layouts/{run.id}/run")
    body = client.get(f"/api/layouts/{run.id}/metrics").get_json()
    assert body["id"] == run.id
    assert body["seed"] == 7
    assert body["metrics"]["rooms_scattered"] == 6
    assert body["metrics"]["settle_ticks"] == 2


def test_settle_timeout_is_conflict(client):
    run = create_run(
        GenerationConfig(seed=3, room_threshold=3, max_settle_ticks=2),
        physics=FakePhysicsWorld(sleep_after=None),
    )
    resp = client.post(f"/api/layouts/{run.id}/tick", json={"ticks": 100})
    assert resp.status_code == 409
    body = resp.get_json()
    assert body["code"] == "settle_timeout"
    assert body["ticks"] == 3
    # the lock is released after the failure
    assert client.get(f"/api/layouts/{run.id}").status_code == 200


def test_strict_triangulation_failure_is_conflict(client):
    run = create_run(
        GenerationConfig(seed=3, room_threshold=4, min_area=0.0, strict_triangulation=True),
        physics=FakePhysicsWorld(sleep_after=1),
        triangulator=FakeTriangulator(error="flat"),
    )
    resp = client.post(f"/api/layouts/{run.id}/run")
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "triangulation_failed"


def test_run_cache_is_capped(test_app, monkeypatch, fake_run):
    monkeypatch.setitem(test_app.config, "LAYOUT_CACHE_MAX", 2)
    first = fake_run()
    second = fake_run()
    third = fake_run()
    assert get_run(first.id) is None
    assert get_run(second.id) is second
    assert get_run(third.id) is third


def test_coerce_seed():
    assert coerce_seed(5) == 5
    assert coerce_seed(" 77 ") == 77
    assert coerce_seed("abc") == coerce_seed("abc")
    assert 1 <= coerce_seed(None) <= 1_000_000
    assert 1 <= coerce_seed("   ") <= 1_000_000


def test_run_that_hits_tick_limit_is_conflict(client, test_app, monkeypatch, fake_run):
    monkeypatch.setitem(test_app.config, "LAYOUT_RUN_MAX_TICKS", 5)
    run = fake_run()
    resp = client.post(f"/api/layouts/{run.id}/run")
    assert resp.status_code == 409
    body = resp.get_json()
    assert body["code"] == "max_ticks"
    assert body["ticks"] == 5
    assert body["phase"] == "scattering"
    # a later call finishes the remaining ticks
    monkeypatch.setitem(test_app.config, "LAYOUT_RUN_MAX_TICKS", 1000)
    assert client.post(f"/api/layouts/{run.id}/run").get_json()["done"] is True
