import asyncio

import httpx
from fastapi.testclient import TestClient

from dronesim.api.api_main import create_command_app, create_stream_app
from dronesim.api.routes_flights import FlightPatternIn
from dronesim.drone.models import PathType
from dronesim.drone.orchestrator import Orchestrator


def _pattern(**overrides):
    body = {
        "path": "patrol",
        "props": "survey",
        "start": {"lat": -33.93, "lon": 151.19},
        "end": {"lat": -33.94, "lon": 151.20, "alt": 20},
        "points": [{"lat": -33.935, "lon": 151.195}],
        "data": [1, 2],
    }
    body.update(overrides)
    return body


def test_fly_queues_command(settings):
    orch = Orchestrator(settings)
    with TestClient(create_command_app(orch)) as client:
        resp = client.post("/fly", json=_pattern())
        assert resp.status_code == 200
        assert resp.json() == {"status": "queued", "path": "patrol", "queued": 1}

        resp = client.post("/fly", json=_pattern(path="Clockwise"))
        assert resp.json()["queued"] == 2

    assert orch.commands.qsize() == 2


def test_fly_maps_unknown_path_to_unrecognized(settings):
    orch = Orchestrator(settings)
    with TestClient(create_command_app(orch)) as client:
        resp = client.post("/fly", json=_pattern(path="loop-the-loop"))
    assert resp.status_code == 200
    assert resp.json()["path"] == PathType.UNRECOGNIZED.value


def test_malformed_payloads_never_reach_queue(settings):
    orch = Orchestrator(settings)
    bad = [
        {"path": "sine"},
        _pattern(start={"lat": "north", "lon": 1.0}),
        _pattern(data=["fast"]),
        _pattern(speed=0),
        _pattern(points=[{"lat": 1.0}]),
    ]
    with TestClient(create_command_app(orch)) as client:
        for body in bad:
            assert client.post("/fly", json=body).status_code == 422
        assert client.post("/fly", content=b"not json", headers={"content-type": "application/json"}).status_code == 422

    assert orch.commands.is_empty()


def test_status_and_health(settings):
    orch = Orchestrator(settings)
    with TestClient(create_command_app(orch)) as client:
        health = client.get("/health").json()
        status = client.get("/telemetry/status").json()

    assert health == {"status": "healthy", "pipeline_running": False, "sink_connected": False}
    assert status["drone"]["name"] == "test-drone"
    assert status["drone"]["state"] == "Ready"
    assert "speed" not in status["drone"]
    assert status["queued_commands"] == 0
    assert status["command_capacity"] == 2
    assert status["current_path"] is None


def test_websocket_echoes_and_registers_sink(settings):
    orch = Orchestrator(settings)
    with TestClient(create_stream_app(orch)) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_text("hello drone")
            reply = ws.receive_text()
            assert reply.startswith("Your message is: hello drone. Time received : ")
            assert orch.sink_manager.connected


def test_fly_waits_while_command_queue_is_full(settings):
    orch = Orchestrator(settings)
    app = create_command_app(orch)

    async def go():
        for path in ("random", "patrol"):
            await orch.submit(FlightPatternIn(**_pattern(path=path)).to_command())
        assert orch.commands.qsize() == 2

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://drone") as client:
            pending = asyncio.create_task(client.post("/fly", json=_pattern(path="sine")))
            await asyncio.sleep(0.1)
            assert not pending.done()

            # the navigator taking a command frees one slot
            first = await orch.commands.next()
            resp = await asyncio.wait_for(pending, timeout=2)

        return first, resp

    first, resp = asyncio.run(go())
    assert first.path is PathType.RANDOM
    assert resp.status_code == 200
    assert resp.json() == {"status": "queued", "path": "sine", "queued": 2}
