import pytest
from unittest.mock import Mock

from senior_assistant.assistant.dispatcher import SessionController
from senior_assistant.assistant.language_service import GenerationReply


class FakeSpeechEngine:
    """
    Stands in for SpeechToTextEngine: delivers listener events
    synchronously when the test says so.
    """

    def __init__(self, supported=True):
        self.supported = supported
        self.unsupported_reason = None if supported else "no microphone"
        self.is_listening = False
        self.listener = None
        self.starts = 0
        self.stops = 0

    def start_activation(self, listener):
        if self.is_listening:
            return False
        self.starts += 1
        self.listener = listener
        self.is_listening = True
        listener.on_start()
        return True

    def stop_activation(self):
        if not self.is_listening:
            return
        self.stops += 1
        self.finish()

    def say(self, transcript):
        self.listener.on_result(transcript)
        self.finish()

    def fail(self, code):
        self.listener.on_error(code)
        self.finish()

    def finish(self):
        self.is_listening = False
        self.listener.on_end()


@pytest.fixture
def speech_engine():
    return FakeSpeechEngine()


@pytest.fixture
def unsupported_speech_engine():
    return FakeSpeechEngine(supported=False)


@pytest.fixture
def tts_engine():
    return Mock()


@pytest.fixture
def language_client():
    client = Mock()
    client.generate.return_value = GenerationReply(text="Respuesta generada")
    return client


@pytest.fixture
def pending_work():
    """Remote calls queued here run only when the test calls them."""
    return []


@pytest.fixture
def controller(speech_engine, tts_engine, language_client):
    return SessionController(
        stt_engine=speech_engine,
        tts_engine=tts_engine,
        language_client=language_client,
        run_in_background=lambda fn: fn()
    )


@pytest.fixture
def deferred_controller(speech_engine, tts_engine, language_client, pending_work):
    return SessionController(
        stt_engine=speech_engine,
        tts_engine=tts_engine,
        language_client=language_client,
        run_in_background=pending_work.append
    )


@pytest.fixture
def recipe_json():
    return {
        "recipeName": "Ensalada",
        "ingredients": ["Lechuga", "Tomate"],
        "instructions": ["Cortar", "Mezclar"]
    }
