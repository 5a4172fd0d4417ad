import httpx
from fastapi.testclient import TestClient

from adapters.openai import OpenAICompletionAdapter
from api import SERVER_ERROR, create_app
from config import get_config
from use_cases.chat import SYSTEM_PROMPT

from fakes import FakeCompletion


def _client(completion):
    return TestClient(create_app(cfg=get_config(), completion=completion))


def test_chat_forwards_persona_history_and_input():
    completion = FakeCompletion("Très bien, merci !")
    client = _client(completion)

    r = client.post(
        "/chat",
        json={
            "history": [
                {"role": "assistant", "content": "Bonjour !"},
                {"role": "user", "content": "Salut"},
            ],
            "userInput": "Comment ça va ?",
        },
    )

    assert r.status_code == 200
    assert r.json() == {"reply": "Très bien, merci !"}
    assert completion.requests[0] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "assistant", "content": "Bonjour !"},
        {"role": "user", "content": "Salut"},
        {"role": "user", "content": "Comment ça va ?"},
    ]


def test_chat_accepts_browser_transcript_shape():
    completion = FakeCompletion()
    client = _client(completion)

    r = client.post(
        "/chat",
        json={
            "history": [{"isUser": True, "text": "Bonjour"}, {"isUser": False, "text": "Salut !"}],
            "userInput": "Ça va ?",
        },
    )

    assert r.status_code == 200
    assert completion.requests[0][1:3] == [
        {"role": "user", "content": "Bonjour"},
        {"role": "assistant", "content": "Salut !"},
    ]


def test_chat_without_history():
    completion = FakeCompletion()

    r = _client(completion).post("/chat", json={"userInput": "Bonjour"})

    assert r.status_code == 200
    assert len(completion.requests[0]) == 2


def test_chat_requires_user_input():
    r = _client(FakeCompletion()).post("/chat", json={"history": []})

    assert r.status_code == 422


def test_missing_api_key_returns_server_error():
    client = _client(OpenAICompletionAdapter(api_key=None))

    r = client.post("/chat", json={"history": [], "userInput": "Bonjour"})

    assert r.status_code == 500
    assert r.json() == {"error": SERVER_ERROR}


def test_upstream_failure_returns_server_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(502))
    client = _client(OpenAICompletionAdapter(api_key="sk-test", transport=transport))

    r = client.post("/chat", json={"history": [], "userInput": "Bonjour"})

    assert r.status_code == 500
    assert r.json() == {"error": SERVER_ERROR}


def test_health_reports_model_without_secrets():
    r = _client(FakeCompletion()).get("/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["model"] == "fake-model"
    assert "openai_api_key" not in body["config"]
    assert "has_openai_api_key" in body["config"]
