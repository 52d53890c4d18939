import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from ..data.models import Recipe
from ..session import SectionId, SessionPhase, SessionState
from ..voice.intent_classifier import Intent, IntentClassifier, IntentType
from ..voice.stt_engine import RecognitionUnsupported
from . import responses
from .language_service import (
    EmptyCandidate,
    GenerationError,
    GenerationReply,
    GenerationRequest,
    MalformedResponse,
    RECIPE_SCHEMA,
)

logger = logging.getLogger(__name__)


REMOTE_INTENTS = (IntentType.EMOTIONAL_SUPPORT, IntentType.RECIPE_REQUEST, IntentType.FALLBACK)


def run_in_thread(fn: Callable[[], None]):
    threading.Thread(target=fn, daemon=True).start()


def call_immediately(fn: Callable[[], None]):
    fn()


class SessionController:
    """
    Drives one voice session: Idle -> Listening -> Processing -> Idle.

    - Receives on_start / on_result / on_error / on_end from the speech input
      engine and owns the listening and processing flags.
    - Classifies each transcript and resolves it, either on the spot
      (navigation, time, date) or through the language service.
    - Ends every resolution by updating the response and speaking it.

    `run_in_background` runs the remote call off the UI thread; `schedule`
    brings its outcome back. The app passes kivy's Clock, tests pass
    synchronous callables.
    """

    def __init__(self, stt_engine, tts_engine, language_client,
                 classifier: IntentClassifier = None,
                 clock: Callable[[], datetime] = datetime.now,
                 run_in_background: Callable[[Callable[[], None]], None] = run_in_thread,
                 schedule: Callable[[Callable[[], None]], None] = call_immediately):
        self.stt_engine = stt_engine
        self.tts_engine = tts_engine
        self.language_client = language_client
        self.classifier = classifier or IntentClassifier()
        self.clock = clock
        self.run_in_background = run_in_background
        self.schedule = schedule

        self.state = SessionState(last_response=responses.WELCOME)
        self.unsupported = False
        self._listeners: List[Callable[[SessionState, SessionPhase], None]] = []
        self._request_counter = 0

        if not getattr(self.stt_engine, 'supported', True):
            self._mark_unsupported(getattr(self.stt_engine, 'unsupported_reason', None))

    # ---------- State ----------
    @property
    def phase(self) -> SessionPhase:
        if self.unsupported:
            return SessionPhase.UNSUPPORTED
        if self.state.listening:
            return SessionPhase.LISTENING
        if self.state.processing:
            return SessionPhase.PROCESSING
        return SessionPhase.IDLE

    def add_listener(self, listener: Callable[[SessionState, SessionPhase], None]):
        """Register a callback invoked after every state change."""
        self._listeners.append(listener)

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self.state, self.phase)
            except Exception as e:
                logger.error(f"Error in session listener: {e}")

    def _mark_unsupported(self, reason: Optional[str]):
        logger.error(f"Speech recognition unsupported: {reason}")
        self.unsupported = True
        self.state.listening = False
        self.state.last_response = responses.RECOGNITION_UNSUPPORTED
        self._notify()

    # ---------- Activation ----------
    def start_activation(self) -> bool:
        """
        Ask the speech engine for one utterance.
        Ignored while unsupported, listening or processing.
        """
        if self.unsupported:
            logger.info("Activation ignored: recognition unsupported")
            return False

        if self.state.listening or self.state.processing:
            logger.warning(f"Activation ignored while {self.phase.value}")
            return False

        self.state.last_transcript = ""
        try:
            return bool(self.stt_engine.start_activation(self))
        except RecognitionUnsupported as e:
            self._mark_unsupported(str(e))
            return False

    def _capture_in_flight(self) -> bool:
        # The engine flag is set before its on_start reaches us through `schedule`
        return self.state.listening or bool(getattr(self.stt_engine, 'is_listening', False))

    def stop_activation(self):
        """Abort recognition. No-op unless a capture is running."""
        if not self._capture_in_flight():
            return
        self.stt_engine.stop_activation()

    def toggle_listening(self) -> bool:
        """Microphone button: stop while listening, start otherwise."""
        if self._capture_in_flight():
            self.stop_activation()
            return False
        return self.start_activation()

    # ---------- Speech input events ----------
    def on_start(self):
        self.state.listening = True
        self.state.last_response = responses.LISTENING
        logger.info("Speech recognition started")
        self._notify()

    def on_result(self, transcript: str):
        self.state.last_transcript = transcript
        self.handle_transcript(transcript)

    def on_error(self, code: str):
        logger.warning(f"Speech recognition error: {code}")
        self.state.last_response = responses.RECOGNITION_ERROR
        self._notify()

    def on_end(self):
        self.state.listening = False
        logger.info("Speech recognition finished")
        self._notify()

    # ---------- Dispatch ----------
    def handle_transcript(self, transcript: str):
        if self.state.processing:
            logger.warning("Transcript ignored: a request is still being processed")
            return

        intent = self.classifier.classify(transcript)
        logger.info(f"Resolved intent: {intent.type.value}")

        if intent.type in REMOTE_INTENTS:
            self._resolve_remote(intent)
        else:
            self._finish(self._resolve_local(intent))

    def _resolve_local(self, intent: Intent) -> str:
        if intent.type is IntentType.TELL_TIME:
            return responses.tell_time(self.clock())

        if intent.type is IntentType.TELL_DATE:
            return responses.tell_date(self.clock())

        section, response = responses.NAVIGATION[intent.type]
        if section is not None:
            self.state.active_section = section
        if intent.type is IntentType.NAVIGATE_HOME:
            self.state.pending_recipe = None
        return response

    def _resolve_remote(self, intent: Intent):
        self._request_counter += 1
        request_id = self._request_counter
        request = self._build_request(intent)

        self.state.processing = True
        self.state.last_response = responses.PROCESSING
        self._notify()
        self._speak(responses.PROCESSING_SPOKEN)

        def work():
            reply, error = None, None
            try:
                reply = self.language_client.generate(request)
            except GenerationError as e:
                error = e
            except Exception as e:
                logger.exception(f"Unexpected language service failure: {e}")
                error = e
            self.schedule(lambda: self._apply_generation(intent, request_id, reply, error))

        logger.info(f"Request #{request_id} sent for {intent.type.value}")
        self.run_in_background(work)

    def _build_request(self, intent: Intent) -> GenerationRequest:
        if intent.type is IntentType.EMOTIONAL_SUPPORT:
            return GenerationRequest(responses.emotional_support_prompt(intent.argument))
        if intent.type is IntentType.RECIPE_REQUEST:
            return GenerationRequest(responses.recipe_prompt(intent.argument), response_schema=RECIPE_SCHEMA)
        return GenerationRequest(intent.argument)

    def _apply_generation(self, intent: Intent, request_id: int,
                          reply: Optional[GenerationReply], error: Optional[Exception]):
        if error is not None:
            kind = getattr(error, 'kind', 'unexpected')
            logger.warning(f"Request #{request_id} failed ({kind}): {error}")
            response = self._failure_response(intent, error)
        elif intent.type is IntentType.RECIPE_REQUEST:
            response = self._apply_recipe(request_id, reply)
        else:
            response = reply.text

        self._finish(response)

    def _failure_response(self, intent: Intent, error: Exception) -> str:
        """An empty reply gets the gentle fallback, any other failure asks to try again."""
        empty, failed = responses.FAILURES[intent.type]
        return empty if isinstance(error, EmptyCandidate) else failed

    def _apply_recipe(self, request_id: int, reply: GenerationReply) -> str:
        try:
            recipe = Recipe.from_json(reply.data)
        except ValueError as e:
            logger.warning(f"Request #{request_id} failed ({MalformedResponse.kind}): {e}")
            return responses.RECIPE_FALLBACK

        self.state.pending_recipe = recipe
        self.state.active_section = SectionId.RECIPES
        return responses.recipe_ready(recipe.name)

    def _finish(self, response: str):
        self.state.processing = False
        self.state.last_response = response
        self._notify()
        self._speak(response)

    def _speak(self, text: str):
        """Fire-and-forget: a speech failure never undoes the state change."""
        try:
            self.tts_engine.speak(text)
        except Exception as e:
            logger.error(f"Error in TTS speak: {e}")

    # ---------- Collaborator sections ----------
    def navigate(self, section: SectionId):
        """Touch navigation to a section. Going home drops the pending recipe."""
        self.state.active_section = section
        if section is SectionId.HOME:
            self.state.pending_recipe = None
        self.report(responses.SECTION_ANNOUNCEMENTS.get(section, ''))

    def report(self, text: str):
        """Show and say the confirmation text a section form produced."""
        if not text:
            self._notify()
            return
        self.state.last_response = text
        self._notify()
        self._speak(text)
