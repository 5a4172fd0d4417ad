import asyncio

import pytest

from domain.errors import UnsupportedFeatureError
from domain.models import Voice
from speech import SpeechPlaybackAdapter, select_voice

from fakes import FakePlaybackEngine, settle

ENGLISH = Voice(id="en", name="English (US)", language="en-US")
CANADIAN = Voice(id="fr-ca", name="Amélie", language="fr_CA")
FRANCE = Voice(id="fr-fr", name="Thomas", language="fr-FR")
NAMED = Voice(id="x", name="French Female")


def test_select_voice_prefers_exact_tag():
    assert select_voice([ENGLISH, CANADIAN, FRANCE], "fr-FR") is FRANCE


def test_select_voice_falls_back_to_language_family():
    assert select_voice([ENGLISH, CANADIAN], "fr-FR") is CANADIAN


def test_select_voice_falls_back_to_name():
    assert select_voice([ENGLISH, NAMED], "fr-FR") is NAMED


def test_select_voice_none_keeps_engine_default():
    assert select_voice([ENGLISH], "fr-FR") is None
    assert select_voice([], "fr-FR") is None


def _recorder(adapter):
    events = []
    adapter.set_listeners(
        on_started=lambda uid: events.append(("started", uid)),
        on_finished=lambda uid: events.append(("finished", uid)),
    )
    return events


def test_speak_fires_started_then_finished():
    async def scenario():
        engine = FakePlaybackEngine(voices=[ENGLISH, FRANCE])
        adapter = SpeechPlaybackAdapter(engine, language="fr-FR", rate=0.85)
        events = _recorder(adapter)
        uid = adapter.speak("Bonjour")
        assert adapter.speaking
        await adapter.wait()
        return engine, adapter, events, uid

    engine, adapter, events, uid = asyncio.run(scenario())

    assert events == [("started", uid), ("finished", uid)]
    assert engine.spoken == [("Bonjour", "fr-FR", 0.85, FRANCE)]
    assert not adapter.speaking
    assert adapter.current_id is None


def test_speak_cancels_previous_utterance():
    async def scenario():
        engine = FakePlaybackEngine(hold=True)
        adapter = SpeechPlaybackAdapter(engine)
        events = _recorder(adapter)
        first = adapter.speak("Premier")
        await settle(lambda: len(engine.spoken) == 1)

        second = adapter.speak("Deuxième")
        await settle(lambda: len(engine.spoken) == 2)
        engine.release()
        await adapter.wait()
        return engine, events, first, second

    engine, events, first, second = asyncio.run(scenario())

    assert first != second
    assert ("finished", first) not in events
    assert events[-1] == ("finished", second)
    assert engine.stops == 1


def test_cancel_suppresses_finished():
    async def scenario():
        engine = FakePlaybackEngine(hold=True)
        adapter = SpeechPlaybackAdapter(engine)
        events = _recorder(adapter)
        uid = adapter.speak("Bonjour")
        await settle(lambda: engine.spoken)

        adapter.cancel()
        await settle()
        return engine, adapter, events, uid

    engine, adapter, events, uid = asyncio.run(scenario())

    assert events == [("started", uid)]
    assert engine.stops == 1
    assert not adapter.speaking


def test_engine_failure_still_finishes():
    async def scenario():
        adapter = SpeechPlaybackAdapter(FakePlaybackEngine(error=RuntimeError("no audio device")))
        events = _recorder(adapter)
        uid = adapter.speak("Bonjour")
        await adapter.wait()
        return events, uid

    events, uid = asyncio.run(scenario())

    assert events == [("started", uid), ("finished", uid)]


def test_unavailable_engine_is_unsupported():
    adapter = SpeechPlaybackAdapter(FakePlaybackEngine(available=False))
    assert not adapter.available
    with pytest.raises(UnsupportedFeatureError):
        adapter.speak("Bonjour")


def test_missing_engine_cancel_is_noop():
    adapter = SpeechPlaybackAdapter(None)
    adapter.cancel()
    assert not adapter.available
