"""Tests for inferno_island.api — the FastAPI driving surface."""

import random
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from inferno_island.api import GameSession, create_app
from inferno_island.llm import LLMError
from inferno_island.synth import LLMSynthesizer, RuleBasedSynthesizer, SynthesisError


@pytest.fixture
def session() -> GameSession:
    rng = random.Random(21)
    return GameSession(RuleBasedSynthesizer(rng), rng=rng)


@pytest.fixture
def client(session) -> TestClient:
    return TestClient(create_app(session))


def test_health(client) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_get_game_camel_case(client) -> None:
    body = client.get("/api/game").json()
    assert body["phase"] == "intro"
    assert body["timeOfDay"] == "morning"
    assert "paradisePairs" in body
    assert body["characters"][0]["isInParadise"] is False


def test_start_then_start_again(client) -> None:
    assert client.post("/api/game/start").json()["phase"] == "playing"
    resp = client.post("/api/game/start")
    assert resp.status_code == 409


def test_advance_requires_playing(client) -> None:
    resp = client.post("/api/game/advance")
    assert resp.status_code == 409
    assert "intro" in resp.json()["detail"]


def test_advance(client) -> None:
    client.post("/api/game/start")
    body = client.post("/api/game/advance").json()
    assert len(body["events"]) >= 1
    assert body["currentEvent"]["id"] == body["events"][-1]["id"]
    assert "affinityChanges" in body["currentEvent"]


def test_ceremony_requires_phase(client) -> None:
    client.post("/api/game/start")
    assert client.post("/api/game/ceremony").status_code == 409


def test_full_game(client) -> None:
    client.post("/api/game/start")
    for _ in range(21):
        body = client.post("/api/game/advance").json()
        if body["phase"] == "ceremony":
            break
    assert body["phase"] == "ceremony"
    done = client.post("/api/game/ceremony").json()
    assert done["phase"] == "results"
    assert done["finalCouples"] is not None

    summary = client.get("/api/game/summary").json()
    assert summary["phase"] == "results"
    assert summary["finalCouples"] is not None


@pytest.mark.parametrize("error,status", [
    (SynthesisError("no JSON object"), 502),
    (LLMError("Cannot connect"), 502),
])
def test_synthesis_failure_keeps_state(session, error, status) -> None:
    synth = AsyncMock()
    synth.synthesize_event.side_effect = error
    session.player.synthesizer = synth
    client = TestClient(create_app(session))
    client.post("/api/game/start")

    resp = client.post("/api/game/advance")
    assert resp.status_code == status
    body = client.get("/api/game").json()
    assert body["phase"] == "playing"
    assert body["events"] == []
    assert "lastError" in client.get("/api/game/summary").json()


def test_restart(client) -> None:
    client.post("/api/game/start")
    client.post("/api/game/advance")
    body = client.post("/api/game/restart").json()
    assert body["phase"] == "intro"
    assert body["events"] == []
    assert "lastError" not in client.get("/api/game/summary").json()


class TestSettings:
    @pytest.fixture(autouse=True)
    def data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        for var in ("INFERNO_SYNTHESIZER", "LLM_PROVIDER_URL", "AUTOPLAY_SPEED"):
            monkeypatch.delenv(var, raising=False)
        return tmp_path

    def test_get_defaults(self, client) -> None:
        body = client.get("/api/settings").json()
        assert body["synthesizer"] == "rules"
        assert body["autoplay"]["speed"] == 8.0

    def test_patch_persists(self, client, data_dir) -> None:
        body = client.patch("/api/settings", json={"autoplay": {"speed": 2.0}}).json()
        assert body["autoplay"] == {"speed": 2.0, "ceremony_delay": 2.0}
        assert (data_dir / "config.json").is_file()
        assert client.get("/api/settings").json()["autoplay"]["speed"] == 2.0

    def test_patch_swaps_synthesizer(self, client, session) -> None:
        client.patch("/api/settings", json={"synthesizer": "llm"})
        assert isinstance(session.player.synthesizer, LLMSynthesizer)

    def test_patch_unknown_synthesizer(self, client, session, data_dir) -> None:
        resp = client.patch("/api/settings", json={"synthesizer": "dice"})
        assert resp.status_code == 400
        assert isinstance(session.player.synthesizer, RuleBasedSynthesizer)
        assert not (data_dir / "config.json").exists()
