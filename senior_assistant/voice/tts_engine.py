import logging
import threading
import time
from typing import Optional

import pyttsx3

logger = logging.getLogger(__name__)


class TextToSpeechEngine:
    """
    Spoken output of the assistant, backed by pyttsx3.

    - speak() is fire-and-forget: it runs in a daemon thread and never raises.
    - A threading.Lock avoids concurrent runAndWait() calls.
    """

    def __init__(self, locale: str = 'es-ES', rate: int = 160):
        self.engine = None
        self.locale = locale
        self.rate = rate
        self.voice_id: Optional[str] = None
        self._speak_lock = threading.Lock()
        self._init_engine()

    def _init_engine(self):
        """Initialize TTS engine and pick a voice that matches the locale."""
        try:
            self.engine = pyttsx3.init()
            voices = self.engine.getProperty('voices') or []

            self.voice_id = self._pick_voice(voices)
            if self.voice_id:
                self.engine.setProperty('voice', self.voice_id)
            else:
                logger.warning(f"No TTS voice found for {self.locale}, using system default")

            self.engine.setProperty('rate', self.rate)
            self.engine.setProperty('volume', 1.0)
            logger.info(f"TTS init: {len(voices)} voices available")

        except Exception as e:
            logger.error(f"Speech output unavailable, pyttsx3 failed to start: {e}")
            self.engine = None

    def _pick_voice(self, voices) -> Optional[str]:
        """
        Prefer an exact locale match ('es-ES' / 'es_ES'), then any voice of
        the same language.
        """
        language = self.locale.split('-')[0].lower()
        exact = {self.locale.lower(), self.locale.lower().replace('-', '_')}

        def tags(voice):
            found = []
            for lang in getattr(voice, 'languages', None) or []:
                if isinstance(lang, bytes):
                    lang = lang.decode('utf-8', errors='ignore')
                found.append(str(lang).strip('\x05').lower())
            found.append(str(getattr(voice, 'id', '')).lower())
            return found

        for voice in voices:
            if any(any(e in tag for e in exact) for tag in tags(voice)):
                return voice.id
        for voice in voices:
            if any(tag == language or tag.startswith(language + '_') or tag.startswith(language + '-')
                   or f".{language}" in tag or f"/{language}" in tag for tag in tags(voice)):
                return voice.id
        return None

    def set_rate(self, rate: int):
        """Speaking rate in words per minute."""
        self.rate = rate
        try:
            if self.engine:
                with self._speak_lock:
                    self.engine.setProperty('rate', rate)
                logger.info(f"Speaking rate: {rate} wpm")
        except Exception as e:
            logger.error(f"Could not change speaking rate: {e}")

    def speak(self, text: str) -> Optional[threading.Thread]:
        """
        Say `text` in the background. Returns the worker thread, or None
        when there is nothing to say.
        """
        if not self.engine:
            logger.warning("Speech output unavailable, text is only shown")
            return None

        if not (text or "").strip():
            return None

        thread = threading.Thread(target=self._speak_implementation, args=(text,), daemon=True)
        thread.start()
        return thread

    def _speak_implementation(self, text: str):
        """
        Serialized access to runAndWait().
        On error, tries a one-time engine re-init and retry.
        """
        with self._speak_lock:
            self._stop_safe()

            # Small pause for audio device stability
            time.sleep(0.1)

            try:
                self.engine.say(text)
                self.engine.runAndWait()
            except Exception as e:
                logger.warning(f"Speech output failed, restarting pyttsx3 once: {e}")
                self._recover_engine()
                try:
                    if self.engine:
                        self.engine.say(text)
                        self.engine.runAndWait()
                except Exception as e2:
                    logger.error(f"Speech output failed again, giving up on this text: {e2}")

    def _recover_engine(self):
        """Drop the current driver and start a fresh one."""
        try:
            self._stop_safe()
            self._init_engine()
        except Exception as e:
            logger.error(f"Could not restart pyttsx3: {e}")

    def _stop_safe(self):
        """Cut the current utterance. Never raises."""
        try:
            if self.engine and hasattr(self.engine, "stop"):
                self.engine.stop()
        except Exception as e:
            logger.error(f"Could not stop speech output: {e}")

    def stop(self):
        """Silence the assistant, e.g. on app exit."""
        self._stop_safe()
