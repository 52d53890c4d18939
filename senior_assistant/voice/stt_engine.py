import json
import logging
import os
import threading
from typing import Callable, Optional

import numpy as np


logger = logging.getLogger(__name__)


SAMPLE_RATE = 16000
FRAMES_PER_BUFFER = 4096

# --- Tuning parameters for older adults / home environments ---
RMS_THRESHOLD = 700       # Ignore frames quieter than this at start
GAIN_FACTOR = 1.5         # Gentle microphone gain
MAX_SILENCE_FRAMES = 25   # End-of-speech after this many quiet frames
MIN_SPEECH_FRAMES = 5     # Require some speech before we accept silence
MAX_WAIT_FRAMES = 30      # Give up after ~8 s with no speech at all
MAX_FRAMES = 10000        # Hard cap on a single activation


class RecognitionUnsupported(Exception):
    """No speech recognition backend is available on this machine."""


class RecognitionError(Exception):
    """A single activation failed; the user may try again."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code


def frame_rms(data: bytes) -> float:
    """Root-mean-square energy of a block of 16-bit little-endian samples."""
    samples = np.frombuffer(data[:len(data) - len(data) % 2], dtype=np.int16)
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(samples.astype(np.float64) ** 2)))


def apply_gain(data: bytes, factor: float) -> bytes:
    """Scale 16-bit samples by `factor`, clipping to the int16 range."""
    samples = np.frombuffer(data[:len(data) - len(data) % 2], dtype=np.int16)
    boosted = samples.astype(np.float64) * factor
    return np.clip(boosted, -32768, 32767).astype(np.int16).tobytes()


def call_immediately(fn: Callable[[], None]):
    fn()


class SpeechToTextEngine:
    """
    Handles microphone input and speech-to-text using Vosk.

    One activation yields one transcript. Listener events are delivered in
    order: on_start, then on_result(text) or on_error(code), then on_end.
    They are handed to `schedule` so the UI can run them on its own thread.
    """

    def __init__(self, model_path: str, schedule: Callable[[Callable[[], None]], None] = None):
        self.model_path = model_path
        self.schedule = schedule or call_immediately
        self.model = None
        self.unsupported_reason: Optional[str] = None
        self.is_listening = False
        self.audio_stream = None
        self.listener = None
        self.listen_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._load_model()

    @property
    def supported(self) -> bool:
        return self.model is not None

    def _load_model(self):
        """
        Load the Vosk model. Missing libraries or a missing model directory
        leave the engine unsupported instead of raising.
        """
        try:
            import vosk
            import pyaudio  # noqa: F401  (checked here, opened per activation)

            if not os.path.exists(self.model_path):
                raise FileNotFoundError(f"Vosk model not found at: {self.model_path}")

            logger.info(f"Loading Vosk model from: {self.model_path}")
            vosk.SetLogLevel(-1)
            self.model = vosk.Model(self.model_path)
            logger.info("Vosk model loaded successfully")

        except ImportError as e:
            self.unsupported_reason = f"Speech libraries not installed: {e}"
            logger.error("Vosk/PyAudio not installed. Run: pip install vosk pyaudio")
        except FileNotFoundError as e:
            self.unsupported_reason = str(e)
            logger.error(f"Model file error: {e}")
        except Exception as e:
            self.unsupported_reason = f"Could not load Vosk model: {e}"
            logger.error(f"Error loading Vosk model: {e}")

    def start_activation(self, listener) -> bool:
        """
        Begin one activation. Returns False when one is already in flight.

        Raises RecognitionUnsupported when there is no recognition backend.
        """
        if not self.supported:
            raise RecognitionUnsupported(self.unsupported_reason or "Speech recognition unavailable")

        if self.is_listening:
            logger.warning("Already listening, ignoring start request")
            return False

        self.listener = listener
        self.is_listening = True
        self._stop_event.clear()
        self._emit('on_start')

        self.listen_thread = threading.Thread(target=self._listen_thread, daemon=True)
        self.listen_thread.start()
        return True

    def stop_activation(self):
        """Abort the current activation. No-op while not listening."""
        if not self.is_listening:
            return
        logger.info("Stop requested")
        self._stop_event.set()

    def _listen_thread(self):
        try:
            transcript = self._capture_utterance()
            if self._stop_event.is_set():
                logger.info("Activation aborted by user")
            elif transcript:
                self._emit('on_result', transcript)
            else:
                self._emit('on_error', 'no-speech')
        except RecognitionError as e:
            logger.warning(f"Recognition error: {e.code}")
            self._emit('on_error', e.code)
        except Exception as e:
            logger.error(f"Error in listen thread: {e}")
            self._emit('on_error', 'audio-capture')
        finally:
            self._cleanup_audio()
            self.is_listening = False
            logger.info("Stopped listening")
            self._emit('on_end')

    def _capture_utterance(self) -> str:
        """
        Read the microphone until end of speech and return the final text.
        Filters background noise and ignores tiny, unreliable outputs.
        """
        import pyaudio
        import vosk

        recognizer = vosk.KaldiRecognizer(self.model, SAMPLE_RATE)
        audio = pyaudio.PyAudio()
        try:
            self.audio_stream = audio.open(
                format=pyaudio.paInt16,
                channels=1,
                rate=SAMPLE_RATE,
                input=True,
                frames_per_buffer=FRAMES_PER_BUFFER
            )
        except OSError as e:
            audio.terminate()
            raise RecognitionError('audio-capture', str(e))

        logger.info("🎤 Listening for commands")

        silence_count = 0
        speech_frames = 0
        processed_frames = 0
        text = ""

        try:
            while not self._stop_event.is_set() and processed_frames < MAX_FRAMES:
                data = self.audio_stream.read(FRAMES_PER_BUFFER, exception_on_overflow=False)
                if not data:
                    continue
                processed_frames += 1

                # ---- Noise filtering (RMS threshold) ----
                rms = frame_rms(data)
                if rms < RMS_THRESHOLD and speech_frames == 0:
                    if processed_frames >= MAX_WAIT_FRAMES:
                        logger.info("No speech detected, ending activation")
                        break
                    continue

                if rms < RMS_THRESHOLD:
                    silence_count += 1
                    if speech_frames > MIN_SPEECH_FRAMES and silence_count > MAX_SILENCE_FRAMES:
                        break
                else:
                    silence_count = 0
                    speech_frames += 1

                if recognizer.AcceptWaveform(apply_gain(data, GAIN_FACTOR)):
                    text = json.loads(recognizer.Result()).get('text', '').strip()
                    if text:
                        break

            if not text and not self._stop_event.is_set():
                text = json.loads(recognizer.FinalResult()).get('text', '').strip()
        finally:
            self._cleanup_audio()
            audio.terminate()

        # ---- Junk rejection: single very short word ----
        if len(text.split()) <= 1 and len(text) <= 3:
            if text:
                logger.info("Ignoring short/uncertain utterance")
            return ""

        logger.info(f"Recognized utterance ({len(text.split())} words)")
        return text

    def _emit(self, event: str, *args):
        listener = self.listener
        if listener is None:
            return
        handler = getattr(listener, event, None)
        if handler:
            self.schedule(lambda: handler(*args))

    def _cleanup_audio(self):
        """
        Clean up audio resources safely.
        """
        if self.audio_stream:
            try:
                self.audio_stream.stop_stream()
                self.audio_stream.close()
            except OSError as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.audio_stream = None
