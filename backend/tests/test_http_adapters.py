import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from adapters.http import HttpResponseGenerator, LanguageToolAnalyzer
from adapters.openai import OpenAICompletionAdapter
from domain.errors import UpstreamError
from domain.models import Feedback
from domain.transcript import TranscriptStore
from feedback import FULL_SENTENCE_SUGGESTION


def _transport(handler, seen=None):
    def wrapped(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return handler(request)

    return httpx.MockTransport(wrapped)


# -- HttpResponseGenerator ---------------------------------------------------

def test_generator_posts_history_and_user_input():
    seen = []
    transport = _transport(lambda r: httpx.Response(200, json={"reply": "Très bien !"}), seen)
    generator = HttpResponseGenerator("http://buddy.test/", transport=transport)
    store = TranscriptStore(greeting="Bonjour !")
    store.commit_turn("Salut", "Ça va ?")

    reply = asyncio.run(generator.generate(store.messages, "Oui, merci"))

    assert reply == "Très bien !"
    assert str(seen[0].url) == "http://buddy.test/chat"
    assert json.loads(seen[0].content) == {
        "history": [
            {"role": "assistant", "content": "Bonjour !"},
            {"role": "user", "content": "Salut"},
            {"role": "assistant", "content": "Ça va ?"},
        ],
        "userInput": "Oui, merci",
    }


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "Erreur côté serveur"}),
        httpx.Response(200, json={"reply": "   "}),
        httpx.Response(200, json={"answer": "Bonjour"}),
        httpx.Response(200, text="not json"),
    ],
)
def test_generator_unusable_response_is_upstream_error(response):
    generator = HttpResponseGenerator("http://buddy.test", transport=_transport(lambda r: response))

    with pytest.raises(UpstreamError):
        asyncio.run(generator.generate([], "Bonjour"))


def test_generator_timeout_is_upstream_error():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    generator = HttpResponseGenerator("http://buddy.test", timeout=0.5, transport=_transport(handler))

    with pytest.raises(UpstreamError, match="timed out"):
        asyncio.run(generator.generate([], "Bonjour"))


# -- LanguageToolAnalyzer ----------------------------------------------------

def test_analyzer_sends_form_and_builds_feedback():
    seen = []
    payload = {
        "matches": [
            {
                "message": "Le participe passé s'accorde.",
                "offset": 8,
                "length": 4,
                "replacements": [{"value": "allée"}, {"value": "allés"}],
            }
        ]
    }
    analyzer = LanguageToolAnalyzer(
        "http://lt.test/v2/check",
        language="fr",
        transport=_transport(lambda r: httpx.Response(200, json=payload), seen),
    )
    text = "Elle est allé au cinéma avec ses amis"

    feedback = asyncio.run(analyzer.analyze(text))

    form = parse_qs(seen[0].content.decode())
    assert form == {"text": [text], "language": ["fr"]}
    assert feedback == Feedback(
        corrections=('Le participe passé s\'accorde. → Essayez: "allée"',),
        suggestions=(FULL_SENTENCE_SUGGESTION,),
    )


def test_analyzer_no_matches():
    analyzer = LanguageToolAnalyzer(transport=_transport(lambda r: httpx.Response(200, json={"matches": []})))

    assert asyncio.run(analyzer.analyze("Bonjour")) == Feedback()


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503),
        httpx.Response(200, json={"matches": "oops"}),
        httpx.Response(200, text="<html>"),
    ],
)
def test_analyzer_unusable_response_is_upstream_error(response):
    analyzer = LanguageToolAnalyzer(transport=_transport(lambda r: response))

    with pytest.raises(UpstreamError):
        asyncio.run(analyzer.analyze("Bonjour"))


# -- OpenAICompletionAdapter -------------------------------------------------

def test_completion_sends_bearer_and_returns_content():
    seen = []
    body = {"choices": [{"message": {"role": "assistant", "content": "Salut !"}}]}
    adapter = OpenAICompletionAdapter(
        "sk-test",
        base_url="http://llm.test/v1",
        model="gpt-4o-mini",
        temperature=0.8,
        transport=_transport(lambda r: httpx.Response(200, json=body), seen),
    )
    messages = [{"role": "user", "content": "Bonjour"}]

    assert asyncio.run(adapter.complete(messages)) == "Salut !"
    request = seen[0]
    assert str(request.url) == "http://llm.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert json.loads(request.content) == {
        "model": "gpt-4o-mini",
        "messages": messages,
        "temperature": 0.8,
    }


def test_completion_without_key_fails_per_request():
    adapter = OpenAICompletionAdapter(None, transport=_transport(lambda r: httpx.Response(200)))

    with pytest.raises(UpstreamError, match="OPENAI_API_KEY"):
        asyncio.run(adapter.complete([]))


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": {"message": "bad key"}}),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
    ],
)
def test_completion_bad_upstream_is_upstream_error(response):
    adapter = OpenAICompletionAdapter("sk-test", transport=_transport(lambda r: response))

    with pytest.raises(UpstreamError):
        asyncio.run(adapter.complete([{"role": "user", "content": "Bonjour"}]))
