from unittest.mock import Mock, patch

import pytest

from senior_assistant.voice.tts_engine import TextToSpeechEngine


def voice(voice_id, languages):
    return Mock(id=voice_id, languages=languages)


@pytest.fixture
def driver():
    engine = Mock()
    engine.getProperty.return_value = [
        voice('english', [b'\x05en-gb']),
        voice('mexican', ['es_MX']),
        voice('spain', ['es_ES']),
    ]
    return engine


@pytest.fixture
def tts(driver):
    with patch('senior_assistant.voice.tts_engine.pyttsx3.init', return_value=driver):
        yield TextToSpeechEngine(locale='es-ES', rate=150)


class TestTextToSpeechEngine:
    @pytest.mark.voice
    def test_picks_exact_locale_voice(self, tts, driver):
        assert tts.voice_id == 'spain'
        driver.setProperty.assert_any_call('voice', 'spain')
        driver.setProperty.assert_any_call('rate', 150)

    @pytest.mark.voice
    def test_falls_back_to_same_language(self, driver):
        driver.getProperty.return_value = [voice('english', ['en_US']), voice('mexican', ['es_MX'])]
        with patch('senior_assistant.voice.tts_engine.pyttsx3.init', return_value=driver):
            tts = TextToSpeechEngine(locale='es-ES')
        assert tts.voice_id == 'mexican'

    @pytest.mark.voice
    def test_no_matching_voice_keeps_default(self, driver):
        driver.getProperty.return_value = [voice('english', ['en_US'])]
        with patch('senior_assistant.voice.tts_engine.pyttsx3.init', return_value=driver):
            tts = TextToSpeechEngine(locale='es-ES')
        assert tts.voice_id is None

    @pytest.mark.voice
    def test_speak(self, tts):
        with patch.object(tts, '_speak_implementation') as implementation:
            thread = tts.speak("Mensaje enviado.")
            thread.join(timeout=5)
        implementation.assert_called_once_with("Mensaje enviado.")

    @pytest.mark.voice
    def test_speak_empty_text(self, tts):
        assert tts.speak("   ") is None

    @pytest.mark.voice
    def test_set_rate(self, tts, driver):
        tts.set_rate(120)
        assert tts.rate == 120
        driver.setProperty.assert_called_with('rate', 120)

    @pytest.mark.voice
    def test_engine_init_failure(self):
        with patch('senior_assistant.voice.tts_engine.pyttsx3.init', side_effect=RuntimeError("no driver")):
            tts = TextToSpeechEngine()
        assert tts.engine is None
        assert tts.speak("Hola") is None

    @pytest.mark.voice
    def test_recovers_once_after_run_error(self, tts, driver):
        driver.runAndWait.side_effect = [RuntimeError("device lost"), None]
        with patch('senior_assistant.voice.tts_engine.pyttsx3.init', return_value=driver):
            tts._speak_implementation("Hola")
        assert driver.runAndWait.call_count == 2

    @pytest.mark.voice
    def test_recovery_failure_is_swallowed(self, tts, driver):
        driver.runAndWait.side_effect = RuntimeError("device lost")
        with patch('senior_assistant.voice.tts_engine.pyttsx3.init', return_value=driver):
            tts._speak_implementation("Hola")
        assert driver.runAndWait.call_count == 2

    @pytest.mark.security
    def test_speech_data_not_logged(self, tts, caplog):
        """Spoken content isn't logged in plain text"""
        with caplog.at_level('INFO'):
            tts._speak_implementation("Recordatorio privado sobre la reunión")
        assert "privado" not in caplog.text
        assert "reunión" not in caplog.text
