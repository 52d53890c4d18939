"""
What the assistant says (es-ES), and the prompts it sends to the
language service.
"""
from datetime import datetime

from ..session import SectionId
from ..voice.intent_classifier import IntentType


WELCOME = '¡Hola! ¿En qué puedo ayudarte?'
LISTENING = 'Escuchando...'
PROCESSING = 'Procesando tu solicitud...'
PROCESSING_SPOKEN = 'Procesando tu solicitud.'
RECOGNITION_ERROR = 'Lo siento, hubo un error con el reconocimiento de voz.'
RECOGNITION_UNSUPPORTED = ('Tu equipo no permite el reconocimiento de voz. '
                           'Revisa que el micrófono y el modelo de voz estén instalados.')

EMOTIONAL_FALLBACK = 'Gracias por compartir cómo te sientes. Siempre estoy aquí para escucharte.'
RECIPE_FALLBACK = 'Lo siento, no pude generar una receta en este momento. ¿Puedes ser más específico?'
GENERAL_FALLBACK = 'Lo siento, no pude entender tu solicitud. ¿Podrías repetirla?'

EMOTIONAL_ERROR = 'Lo siento, hubo un problema al procesar tu solicitud. Por favor, inténtalo de nuevo.'
RECIPE_ERROR = 'Hubo un problema al generar la receta. Por favor, inténtalo de nuevo.'
GENERAL_ERROR = ('Hubo un problema al procesar tu solicitud con el asistente. '
                 'Por favor, inténtalo de nuevo.')

# Remote intents: (reply came back empty, request failed)
FAILURES = {
    IntentType.EMOTIONAL_SUPPORT: (EMOTIONAL_FALLBACK, EMOTIONAL_ERROR),
    IntentType.RECIPE_REQUEST: (RECIPE_FALLBACK, RECIPE_ERROR),
    IntentType.FALLBACK: (GENERAL_FALLBACK, GENERAL_ERROR),
}

# Navigation intents: (section, response)
NAVIGATION = {
    IntentType.GREETING: (None, '¡Hola! ¿Cómo puedo ayudarte hoy?'),
    IntentType.OPEN_VIDEO_CALL: (
        SectionId.VIDEO_CALLS,
        'Abriendo la sección de videollamadas. ¿A quién te gustaría llamar?'),
    IntentType.OPEN_MESSAGES: (
        SectionId.MESSAGES,
        'Abriendo la sección de mensajes. ¿A quién le quieres enviar un mensaje y qué quieres decir?'),
    IntentType.OPEN_REMINDERS: (
        SectionId.REMINDERS,
        'Abriendo la sección de recordatorios. ¿Qué recordatorio te gustaría añadir?'),
    IntentType.OPEN_ACTIVITIES: (
        SectionId.ACTIVITIES,
        'Buscando actividades y eventos cerca de ti. ¿Hay algo específico que te interese?'),
    IntentType.OPEN_EMERGENCY: (
        SectionId.EMERGENCY,
        'Activando servicios de emergencia. Mantén la calma, la ayuda está en camino.'),
    IntentType.OPEN_MEDICATION_REQUEST: (
        SectionId.MEDICATION,
        'Abriendo la sección de solicitud de medicamentos. '
        'Por favor, dime qué medicamento necesitas y la cantidad.'),
    IntentType.OPEN_APPOINTMENTS: (
        SectionId.APPOINTMENTS,
        'Abriendo la sección de citas médicas. Puedes agendar una nueva cita o revisar tus citas existentes.'),
    IntentType.OPEN_NEARBY_HOSPITALS: (
        SectionId.NEARBY_HOSPITALS,
        'Buscando hospitales cercanos. Necesitaré permiso para acceder a tu ubicación.'),
    IntentType.HEALTH_ROUTINE: (
        SectionId.REMINDERS,
        'Para el seguimiento de rutinas y salud, puedo ayudarte a configurar recordatorios '
        'o buscar información. ¿Qué necesitas específicamente?'),
    IntentType.NAVIGATE_HOME: (SectionId.HOME, 'Volviendo a la página de inicio.'),
}

# Short announcement when a section is opened by touch
SECTION_ANNOUNCEMENTS = {
    SectionId.HOME: 'Volviendo a la página de inicio.',
    SectionId.VIDEO_CALLS: 'Sección de videollamadas.',
    SectionId.MESSAGES: 'Sección de mensajes.',
    SectionId.REMINDERS: 'Sección de recordatorios.',
    SectionId.ACTIVITIES: 'Sección de actividades.',
    SectionId.RECIPES: 'Sección de recetas. ¿Qué receta te gustaría encontrar?',
    SectionId.MEDICATION: 'Sección de solicitud de medicamentos.',
    SectionId.APPOINTMENTS: 'Sección de citas médicas.',
    SectionId.NEARBY_HOSPITALS: 'Buscando hospitales cercanos.',
    SectionId.EMERGENCY: 'Activando servicios de emergencia.',
}

WEEKDAYS = ['lunes', 'martes', 'miércoles', 'jueves', 'viernes', 'sábado', 'domingo']
MONTHS = ['enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio', 'julio',
          'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre']


def recipe_ready(recipe_name: str) -> str:
    return f'¡Aquí tienes una receta para "{recipe_name}"!'


def tell_time(now: datetime) -> str:
    return f"Son las {now.hour} y {now.minute} minutos."


def long_date(day: datetime) -> str:
    """'lunes, 19 de octubre de 2026'"""
    return f"{WEEKDAYS[day.weekday()]}, {day.day} de {MONTHS[day.month - 1]} de {day.year}"


def tell_date(today: datetime) -> str:
    return f"Hoy es {long_date(today)}."


# ---------- Prompts ----------
def emotional_support_prompt(text: str) -> str:
    return (
        f'El usuario dice: "{text}". Ofrece palabras de apoyo, aliento y sugiere una actividad '
        'sencilla y positiva para mejorar su estado de ánimo, manteniendo un tono cálido y empático. '
        'Responde en español y no uses lenguaje técnico.'
    )


def recipe_prompt(query: str) -> str:
    return (
        "Genera una receta saludable en formato JSON con los siguientes campos: "
        "'recipeName' (string), 'ingredients' (array de strings), y 'instructions' (array de strings), "
        f"para el siguiente tema/ingredientes: {query or 'una receta saludable y fácil'}."
    )
