import math
import sys
from array import array
from unittest.mock import Mock, patch

import pytest

from senior_assistant.voice.stt_engine import (
    FRAMES_PER_BUFFER,
    MAX_WAIT_FRAMES,
    RecognitionError,
    RecognitionUnsupported,
    SpeechToTextEngine,
    apply_gain,
    frame_rms,
)


def quiet_microphone():
    """pyaudio and vosk stand-ins: the stream only ever returns silence."""
    stream = Mock()
    stream.read.return_value = b"\x00" * (FRAMES_PER_BUFFER * 2)
    pyaudio = Mock()
    pyaudio.PyAudio.return_value.open.return_value = stream

    recognizer = Mock()
    recognizer.AcceptWaveform.return_value = False
    recognizer.FinalResult.return_value = '{"text": ""}'
    vosk = Mock()
    vosk.KaldiRecognizer.return_value = recognizer
    return stream, {'pyaudio': pyaudio, 'vosk': vosk}


def event_names(listener):
    return [call[0] for call in listener.method_calls]


class TestSpeechToTextEngine:
    @pytest.fixture
    def stt(self):
        with patch.object(SpeechToTextEngine, '_load_model'):
            engine = SpeechToTextEngine("unused-model-path")
        engine.model = object()
        return engine

    @pytest.fixture
    def listener(self):
        return Mock(spec=['on_start', 'on_result', 'on_error', 'on_end'])

    def run_activation(self, stt, listener, capture):
        with patch.object(stt, '_capture_utterance', side_effect=capture):
            assert stt.start_activation(listener) is True
            stt.listen_thread.join(timeout=5)

    @pytest.mark.voice
    def test_events_in_order(self, stt, listener):
        self.run_activation(stt, listener, lambda: "qué hora es")
        assert event_names(listener) == ['on_start', 'on_result', 'on_end']
        listener.on_result.assert_called_once_with("qué hora es")
        assert stt.is_listening is False

    @pytest.mark.voice
    def test_nothing_heard_reports_no_speech(self, stt, listener):
        self.run_activation(stt, listener, lambda: "")
        assert event_names(listener) == ['on_start', 'on_error', 'on_end']
        listener.on_error.assert_called_once_with('no-speech')

    @pytest.mark.voice
    def test_capture_error_still_ends(self, stt, listener):
        def capture():
            raise RecognitionError('audio-capture', "device busy")

        self.run_activation(stt, listener, capture)
        assert event_names(listener) == ['on_start', 'on_error', 'on_end']
        listener.on_error.assert_called_once_with('audio-capture')

    @pytest.mark.voice
    def test_unexpected_error_still_ends(self, stt, listener):
        def capture():
            raise RuntimeError("driver crashed")

        self.run_activation(stt, listener, capture)
        assert event_names(listener)[-1] == 'on_end'

    @pytest.mark.voice
    def test_stop_aborts_without_result(self, stt, listener):
        def capture():
            stt._stop_event.wait(5)
            return "texto parcial"

        with patch.object(stt, '_capture_utterance', side_effect=capture):
            stt.start_activation(listener)
            stt.stop_activation()
            stt.listen_thread.join(timeout=5)

        assert event_names(listener) == ['on_start', 'on_end']

    @pytest.mark.voice
    def test_silence_ends_capture_after_wait_limit(self, stt):
        stream, modules = quiet_microphone()
        with patch.dict(sys.modules, modules):
            assert stt._capture_utterance() == ""

        assert stream.read.call_count == MAX_WAIT_FRAMES
        assert MAX_WAIT_FRAMES * FRAMES_PER_BUFFER / 16000 < 10
        stream.close.assert_called_once()

    @pytest.mark.voice
    def test_silent_activation_reports_no_speech(self, stt, listener):
        stream, modules = quiet_microphone()
        with patch.dict(sys.modules, modules):
            stt.start_activation(listener)
            stt.listen_thread.join(timeout=5)

        assert not stt.listen_thread.is_alive()
        assert event_names(listener) == ['on_start', 'on_error', 'on_end']
        listener.on_error.assert_called_once_with('no-speech')

    @pytest.mark.voice
    def test_start_while_listening_is_rejected(self, stt, listener):
        stt.is_listening = True
        assert stt.start_activation(listener) is False
        listener.on_start.assert_not_called()

    @pytest.mark.voice
    def test_stop_when_idle_is_noop(self, stt):
        stt.stop_activation()
        stt.stop_activation()
        assert not stt._stop_event.is_set()

    @pytest.mark.voice
    def test_events_go_through_schedule(self, listener):
        scheduled = []
        with patch.object(SpeechToTextEngine, '_load_model'):
            engine = SpeechToTextEngine("unused-model-path", schedule=scheduled.append)
        engine.model = object()

        with patch.object(engine, '_capture_utterance', return_value="hola"):
            engine.start_activation(listener)
            engine.listen_thread.join(timeout=5)

        listener.on_start.assert_not_called()
        for fn in scheduled:
            fn()
        assert event_names(listener) == ['on_start', 'on_result', 'on_end']

    @pytest.mark.voice
    def test_missing_model_is_unsupported(self, tmp_path, listener):
        engine = SpeechToTextEngine(str(tmp_path / "no-such-model"))
        assert engine.supported is False
        assert engine.unsupported_reason
        with pytest.raises(RecognitionUnsupported):
            engine.start_activation(listener)

    @pytest.mark.security
    def test_voice_data_not_stored(self, stt):
        """Audio frames are not kept after an activation"""
        assert not hasattr(stt, 'audio_storage')
        assert not hasattr(stt, 'save_audio')


class TestAudioHelpers:
    def test_frame_rms(self):
        data = array('h', [1000, -1000, 1000, -1000]).tobytes()
        assert math.isclose(frame_rms(data), 1000.0)

    def test_frame_rms_empty(self):
        assert frame_rms(b"") == 0.0

    def test_gain_clips_to_int16(self):
        data = array('h', [30000, -30000, 100]).tobytes()
        boosted = array('h')
        boosted.frombytes(apply_gain(data, 1.5))
        assert list(boosted) == [32767, -32768, 150]
