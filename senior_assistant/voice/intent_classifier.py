import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class IntentType(str, Enum):
    GREETING = 'GREETING'
    OPEN_VIDEO_CALL = 'OPEN_VIDEO_CALL'
    OPEN_MESSAGES = 'OPEN_MESSAGES'
    OPEN_REMINDERS = 'OPEN_REMINDERS'
    OPEN_ACTIVITIES = 'OPEN_ACTIVITIES'
    OPEN_EMERGENCY = 'OPEN_EMERGENCY'
    EMOTIONAL_SUPPORT = 'EMOTIONAL_SUPPORT'
    RECIPE_REQUEST = 'RECIPE_REQUEST'
    OPEN_MEDICATION_REQUEST = 'OPEN_MEDICATION_REQUEST'
    OPEN_APPOINTMENTS = 'OPEN_APPOINTMENTS'
    OPEN_NEARBY_HOSPITALS = 'OPEN_NEARBY_HOSPITALS'
    HEALTH_ROUTINE = 'HEALTH_ROUTINE'
    NAVIGATE_HOME = 'NAVIGATE_HOME'
    TELL_TIME = 'TELL_TIME'
    TELL_DATE = 'TELL_DATE'
    FALLBACK = 'FALLBACK'


@dataclass(frozen=True)
class Intent:
    """
    Result of classifying one transcript.

    `argument` carries the normalized transcript for EMOTIONAL_SUPPORT and
    FALLBACK, and the recipe query for RECIPE_REQUEST (empty means
    "any healthy recipe"). It is None for every other intent.
    """
    type: IntentType
    argument: Optional[str] = None


# Ordered (keywords, intent) rules. The first rule with a keyword contained
# in the transcript wins, so "estoy triste, dame una receta" is emotional support.
INTENT_RULES: List[Tuple[Sequence[str], IntentType]] = [
    (('hola', 'saludo'), IntentType.GREETING),
    (('videollamada', 'llamar a'), IntentType.OPEN_VIDEO_CALL),
    (('mensaje', 'enviar mensaje'), IntentType.OPEN_MESSAGES),
    (('recordatorio', 'crear recordatorio'), IntentType.OPEN_REMINDERS),
    (('actividades', 'eventos'), IntentType.OPEN_ACTIVITIES),
    (('emergencia', 'ayuda'), IntentType.OPEN_EMERGENCY),
    (('me siento', 'estoy triste', 'estoy solo', 'estoy feliz'), IntentType.EMOTIONAL_SUPPORT),
    (('receta', 'qué puedo cocinar', 'dame una receta'), IntentType.RECIPE_REQUEST),
    (('medicamento', 'solicitar medicamento'), IntentType.OPEN_MEDICATION_REQUEST),
    (('cita médica', 'agendar cita', 'citas'), IntentType.OPEN_APPOINTMENTS),
    (('hospital cercano', 'hospitales cercanos', 'dónde hay un hospital'), IntentType.OPEN_NEARBY_HOSPITALS),
    (('rutina', 'salud'), IntentType.HEALTH_ROUTINE),
    (('regresar', 'inicio', 'volver'), IntentType.NAVIGATE_HOME),
    (('qué hora es',), IntentType.TELL_TIME),
    (('qué día es hoy',), IntentType.TELL_DATE),
]

# Longest first: "dame una receta de" must go before "dame una receta"
RECIPE_PREFIXES = (
    'dame una receta de',
    'qué puedo cocinar con',
    'dame una receta',
    'qué puedo cocinar',
)


class IntentClassifier:
    """
    Maps a transcript to exactly one Intent.

    Pure: no speech, network or UI access, so it can be tested on its own.
    """

    def __init__(self, rules: List[Tuple[Sequence[str], IntentType]] = None,
                 recipe_prefixes: Sequence[str] = RECIPE_PREFIXES):
        self.rules = list(INTENT_RULES if rules is None else rules)
        self.recipe_prefixes = tuple(recipe_prefixes)

    def classify(self, transcript: str) -> Intent:
        text = self.normalize(transcript)

        for keywords, intent_type in self.rules:
            if any(keyword in text for keyword in keywords):
                logger.debug(f"Matched rule {intent_type.value}")
                return self._build_intent(intent_type, text)

        return Intent(IntentType.FALLBACK, text)

    def normalize(self, transcript: str) -> str:
        """Lower-case and collapse whitespace."""
        if not transcript:
            return ""
        return re.sub(r"\s+", " ", transcript.lower()).strip()

    def extract_recipe_query(self, text: str) -> str:
        """
        Strip the known request phrases and keep what the user wants to cook.
        'dame una receta de pollo' -> 'pollo'
        """
        query = text
        for prefix in self.recipe_prefixes:
            query = query.replace(prefix, '')
        return query.strip(" ,.¿?¡!")

    def _build_intent(self, intent_type: IntentType, text: str) -> Intent:
        if intent_type is IntentType.EMOTIONAL_SUPPORT:
            return Intent(intent_type, text)
        if intent_type is IntentType.RECIPE_REQUEST:
            return Intent(intent_type, self.extract_recipe_query(text))
        return Intent(intent_type)


_default_classifier = IntentClassifier()


def classify(transcript: str) -> Intent:
    """Classify with the default rule list."""
    return _default_classifier.classify(transcript)
