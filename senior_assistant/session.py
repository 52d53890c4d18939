from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .data.models import Recipe


class SectionId(str, Enum):
    """UI section currently visible. Opaque to the controller."""
    HOME = 'home'
    VIDEO_CALLS = 'videollamadas'
    MESSAGES = 'mensajes'
    REMINDERS = 'recordatorios'
    ACTIVITIES = 'actividades'
    EMERGENCY = 'emergencia'
    RECIPES = 'recetas'
    MEDICATION = 'medicamentos'
    APPOINTMENTS = 'citasMedicas'
    NEARBY_HOSPITALS = 'hospitalesCercanos'


class SessionPhase(str, Enum):
    IDLE = 'idle'
    LISTENING = 'listening'
    PROCESSING = 'processing'
    UNSUPPORTED = 'unsupported'


@dataclass
class SessionState:
    """
    Everything the presentation layer needs to render one session.
    Only the SessionController mutates it.
    """
    listening: bool = False
    processing: bool = False
    last_transcript: str = ""
    last_response: str = ""
    active_section: SectionId = SectionId.HOME
    pending_recipe: Optional[Recipe] = None
