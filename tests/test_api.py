"""Tests for the FastAPI API endpoints."""

import pytest
from fastapi.testclient import TestClient

from rulebot.api.app import create_app
from rulebot.handlers.registry import HandlerRegistry
from rulebot.models.config import BotConfig
from rulebot.models.state import StateDefinition


def _make_definition() -> StateDefinition:
    return StateDefinition.model_validate({
        "invalid_answers": ["Huh?"],
        "states": [
            {"id": "0", "messages": ["Hi, what's your name?"], "keywords": [
                {"keyword": "(\\w+)", "variable": "name", "target": "1", "points": 1},
            ]},
            {"id": "1", "messages": ["Hello [name]! Ask for the weather."], "keywords": [
                {"keyword": "weather in (\\w+)", "variable": "city",
                 "className": "Weather", "arg": "today", "points": 2},
                {"keyword": "about (\\w+)", "variable": "subject", "target": "2", "points": 1},
                {"keyword": "broken", "target": "99", "points": 1},
            ]},
            {"id": "2", "messages": ["Tell me about [subject]."], "keywords": [
                {"keyword": "(.+)", "variable": "fact", "learn": "subject",
                 "target": "3", "points": 1},
            ]},
            {"id": "3", "messages": ["Noted."]},
        ],
    })


@pytest.fixture
def client():
    """Create a test client with a fake weather handler."""
    registry = HandlerRegistry()
    registry.register("Weather", lambda arg, city: f"{arg}: sunny in {city}")
    app = create_app(
        definition=_make_definition(),
        registry=registry,
        config=BotConfig(),
    )
    return TestClient(app)


def _start(client) -> str:
    response = client.post("/sessions")
    assert response.status_code == 200
    return response.json()["session_id"]


class TestSessionEndpoints:
    def test_create_session(self, client):
        response = client.post("/sessions")
        assert response.status_code == 200
        data = response.json()
        assert data["session_id"].startswith("sess_")
        assert data["message"] == "Hi, what's your name?"
        assert data["level"] == "0"

    def test_send_and_message(self, client):
        sid = _start(client)

        response = client.post(f"/sessions/{sid}/send", json={"text": "I am Alice"})
        assert response.status_code == 200
        data = response.json()
        assert data["reply"] == "Hello Alice! Ask for the weather."
        assert data["level"] == "1"

        message = client.get(f"/sessions/{sid}/message").json()
        assert message == {"message": "Hello Alice! Ask for the weather.", "level": "1"}

    def test_weather_dispatch(self, client):
        sid = _start(client)
        client.post(f"/sessions/{sid}/send", json={"text": "Alice"})

        data = client.post(f"/sessions/{sid}/send", json={"text": "weather in Oslo"}).json()
        assert data["reply"] == "today: sunny in Oslo"
        assert data["level"] == "1"

        variables = client.get(f"/sessions/{sid}/variables").json()
        assert variables == {"name": "Alice", "city": "Oslo"}

    def test_invalid_answer(self, client):
        sid = _start(client)
        data = client.post(f"/sessions/{sid}/send", json={"text": "???"}).json()
        assert data["reply"] == "Huh?"
        assert data["level"] == "0"

    def test_unknown_state_is_server_error(self, client):
        sid = _start(client)
        client.post(f"/sessions/{sid}/send", json={"text": "Alice"})

        response = client.post(f"/sessions/{sid}/send", json={"text": "broken"})
        assert response.status_code == 500
        assert "99" in response.json()["detail"]

    def test_unknown_session(self, client):
        assert client.get("/sessions/sess_nope/message").status_code == 404
        assert client.post("/sessions/sess_nope/send", json={"text": "hi"}).status_code == 404

    def test_end_session(self, client):
        sid = _start(client)
        assert client.delete(f"/sessions/{sid}").status_code == 200
        assert client.delete(f"/sessions/{sid}").status_code == 404

    def test_history(self, client):
        sid = _start(client)
        client.post(f"/sessions/{sid}/send", json={"text": "Alice"})
        history = client.get(f"/sessions/{sid}/history").json()
        assert len(history) == 1
        assert history[0]["matched"] == "transition"
        assert history[0]["captured"] == "Alice"


class TestLearningIsolation:
    def test_learning_stays_in_its_session(self, client):
        first = _start(client)
        other = _start(client)

        client.post(f"/sessions/{first}/send", json={"text": "Bob"})
        client.post(f"/sessions/{first}/send", json={"text": "about Zed"})
        reply = client.post(f"/sessions/{first}/send", json={"text": "plays chess"}).json()
        assert reply["reply"] == "Noted."

        recalled = client.post(f"/sessions/{first}/send", json={"text": "Zed"}).json()
        assert recalled["reply"] == "plays chess"

        learned = client.get(f"/sessions/{first}/learned").json()
        assert [f["subject"] for f in learned] == ["Zed"]

        client.post(f"/sessions/{other}/send", json={"text": "Ann"})
        untaught = client.post(f"/sessions/{other}/send", json={"text": "Zed"}).json()
        assert untaught["reply"] == "Huh?"

        definition = client.get("/definition").json()
        assert [s["id"] for s in definition["states"]] == ["0", "1", "2", "3"]

    def test_learned_grouped_by_subject(self, client):
        sid = _start(client)
        client.post(f"/sessions/{sid}/send", json={"text": "Bob"})
        for subject, fact in (("Zed", "plays chess"), ("Amy", "sings"), ("Zed", "likes go")):
            client.post(f"/sessions/{sid}/send", json={"text": f"about {subject}"})
            client.post(f"/sessions/{sid}/send", json={"text": fact})

        grouped = client.get(f"/sessions/{sid}/learned", params={"by_subject": True}).json()

        assert sorted(grouped) == ["Amy", "Zed"]
        assert [f["response"] for f in grouped["Zed"]] == ["plays chess", "likes go"]
        assert [f["response"] for f in grouped["Amy"]] == ["sings"]


class TestInfoEndpoints:
    def test_handlers(self, client):
        assert client.get("/handlers").json() == ["Weather"]

    def test_definition(self, client):
        data = client.get("/definition").json()
        assert data["invalid_answers"] == ["Huh?"]
        assert data["next_id"] == "4"


class RecordingLock:
    def __init__(self):
        self.entered = 0

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, *exc):
        return False


class TestSessionLocking:
    @pytest.mark.parametrize("path", ["message", "variables", "history", "learned"])
    def test_reads_take_the_session_lock(self, client, path):
        sid = _start(client)
        lock = RecordingLock()
        client.app.state.sessions[sid].lock = lock

        assert client.get(f"/sessions/{sid}/{path}").status_code == 200
        assert lock.entered == 1
