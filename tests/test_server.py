import asyncio
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from rpsbrain import OpponentBrain, SessionStore
from server import main

from fakes import FakeService, FixedRandom, base_request, model_reply


@pytest.fixture
def client(tmp_path, monkeypatch):
    brain = OpponentBrain()
    brain.rng = FixedRandom(0.0)
    monkeypatch.setattr(main, "brain", brain)
    monkeypatch.setattr(main, "store", SessionStore(str(tmp_path / "sessions")))
    return TestClient(main.app)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["ai_provider"] == "fallback"


def test_play_fallback(client):
    r = client.post("/api/play", json=base_request())
    assert r.status_code == 200
    body = r.json()
    assert body["aiMove"] == "paper"
    assert body["winner"] == "ai"
    assert body["difficultyLevel"] == "medium"
    assert body["confidence"] == 30


def test_play_with_model(client, monkeypatch):
    brain = OpponentBrain(service=FakeService(text=model_reply()))
    brain.rng = FixedRandom(0.0)
    monkeypatch.setattr(main, "brain", brain)
    body = client.post("/api/play", json=base_request(playerMove="paper")).json()
    assert body["predictedPlayerMove"] == "scissors"
    assert body["aiMove"] == "rock"
    assert body["winner"] == "player"
    assert body["mindGameEvent"] == "confidence_trap"


def test_play_validation_error(client):
    r = client.post("/api/play", json=base_request(playerMove="lizard"))
    assert r.status_code == 400
    assert r.json() == {"valid": False, "error": "Invalid or missing playerMove"}

    r = client.post("/api/play", content=b"not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json()["valid"] is False


def test_body_limit(client):
    r = client.post("/api/play", json=base_request(onboardingAnswer="x" * 20000))
    assert r.status_code == 413


def test_unexpected_error_is_generic_500(tmp_path, monkeypatch):
    class Broken(OpponentBrain):
        async def play(self, payload):
            raise RuntimeError("kaboom")

    monkeypatch.setattr(main, "brain", Broken())
    monkeypatch.setattr(main, "store", SessionStore(str(tmp_path)))
    c = TestClient(main.app, raise_server_exceptions=False)
    r = c.post("/api/play", json=base_request())
    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error"}


def test_session_play_persists(client):
    r = client.post("/api/sessions/alice/play", json={"playerMove": "rock", "personality": "Friendly"})
    assert r.status_code == 200
    assert r.json()["round"]["winner"] == "ai"
    assert r.json()["stats"]["losses"] == 1

    client.post("/api/sessions/alice/play", json={"playerMove": "rock"})
    state = client.get("/api/sessions/alice").json()
    assert state["stats"]["loseStreak"] == 2
    assert state["personality"] == "Friendly"
    assert len(state["history"]) == 2
    assert state["history"][0]["playerMove"] == "rock"

    # two losses in a row: the opponent eases off
    r = client.post("/api/sessions/alice/play", json={"playerMove": "rock"})
    assert r.json()["round"]["difficultyLevel"] == "easy"


def test_failed_session_round_leaves_state(client):
    client.post("/api/sessions/bob/play", json={"playerMove": "rock"})
    before = client.get("/api/sessions/bob").json()
    r = client.post("/api/sessions/bob/play", json={"playerMove": "lizard"})
    assert r.status_code == 400
    r = client.post("/api/sessions/bob/play", json={"playerMove": "rock", "personality": "Evil"})
    assert r.status_code == 400
    assert client.get("/api/sessions/bob").json() == before


def test_session_keys_and_delete(client):
    assert client.get("/api/sessions/nobody").status_code == 404
    assert client.get("/api/sessions/bad.key").status_code == 400
    client.post("/api/sessions/carol/play", json={"playerMove": "paper"})
    assert client.delete("/api/sessions/carol").json() == {"ok": True}
    assert client.get("/api/sessions/carol").status_code == 404


def test_session_play_validation_error(client):
    for body in ({"playerMove": 5}, {}):
        r = client.post("/api/sessions/dave/play", json=body)
        assert r.status_code == 400
        assert r.json() == {"valid": False, "error": "Invalid or missing playerMove"}

    r = client.post("/api/sessions/dave/play", json=["rock"])
    assert r.status_code == 400
    assert r.json()["valid"] is False
    r = client.post("/api/sessions/dave/play", json={"playerMove": "rock", "onboardingAnswer": 3})
    assert r.status_code == 400
    assert client.get("/api/sessions/dave").status_code == 404


def test_chunked_body_limit(client):
    def chunks():
        yield b'{"playerMove": "rock", "onboardingAnswer": "'
        for _ in range(3):
            yield b"x" * 5000
        yield b'"}'

    r = client.post("/api/play", content=chunks(), headers={"content-type": "application/json"})
    assert r.status_code == 413


class SlowStore(SessionStore):
    def load(self, key):
        time.sleep(0.4)
        return super().load(key)


def test_session_rounds_overlap(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "brain", OpponentBrain())
    monkeypatch.setattr(main, "store", SlowStore(str(tmp_path)))

    async def run():
        transport = httpx.ASGITransport(app=main.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            start = time.perf_counter()
            rs = await asyncio.gather(
                *(c.post(f"/api/sessions/u{i}/play", json={"playerMove": "rock"}) for i in range(4))
            )
            return rs, time.perf_counter() - start

    rs, elapsed = asyncio.run(run())
    assert [r.status_code for r in rs] == [200] * 4
    # four blocking loads of 0.4s each would take 1.6s back to back
    assert elapsed < 1.2
