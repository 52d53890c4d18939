import logging
from kivy.uix.screenmanager import Screen
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.gridlayout import GridLayout
from kivy.uix.scrollview import ScrollView
from kivy.uix.label import Label
from kivy.uix.button import Button
from kivy.properties import StringProperty, NumericProperty
from kivy.metrics import dp

from ..session import SectionId, SessionPhase
from .popups import RecordFormPopup

logger = logging.getLogger(__name__)


HOME_SHORTCUTS = [
    ('Videollamadas', SectionId.VIDEO_CALLS),
    ('Mensajes', SectionId.MESSAGES),
    ('Recordatorios', SectionId.REMINDERS),
    ('Actividades', SectionId.ACTIVITIES),
    ('Recetas', SectionId.RECIPES),
    ('Medicamentos', SectionId.MEDICATION),
    ('Citas médicas', SectionId.APPOINTMENTS),
    ('Hospitales cercanos', SectionId.NEARBY_HOSPITALS),
    ('Emergencia', SectionId.EMERGENCY),
]

SECTION_TITLES = {
    SectionId.HOME: 'Bienvenido a Senior Connect',
    SectionId.VIDEO_CALLS: 'Videollamadas',
    SectionId.MESSAGES: 'Mensajes',
    SectionId.REMINDERS: 'Recordatorios',
    SectionId.ACTIVITIES: 'Actividades y Eventos',
    SectionId.EMERGENCY: 'Modo de Emergencia',
    SectionId.RECIPES: 'Recetas Saludables',
    SectionId.MEDICATION: 'Solicitud de Medicamentos',
    SectionId.APPOINTMENTS: 'Citas Médicas',
    SectionId.NEARBY_HOSPITALS: 'Hospitales Cercanos',
}


def wrapped_label(text, **kwargs):
    label = Label(text=text, size_hint_y=None, halign='center', valign='middle', **kwargs)
    label.bind(width=lambda inst, w: setattr(inst, 'text_size', (w, None)))
    label.bind(texture_size=lambda inst, size: setattr(inst, 'height', max(dp(40), size[1] + dp(8))))
    return label


class MainScreen(Screen):
    """
    Assistant response, last transcript, microphone button and the panel
    of the active section. Re-rendered from the controller's state.
    """
    font_family = StringProperty('Roboto')
    font_size = NumericProperty(20)

    def __init__(self, controller, records, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller
        self.records = records
        self._rendered_section = None
        self.hospitals_shown = []

        root = BoxLayout(orientation='vertical', padding=dp(16), spacing=dp(10))

        root.add_widget(Label(text='Asistente dice:', size_hint_y=None, height=dp(30)))
        self.response_label = wrapped_label("", bold=True, color=(0.11, 0.31, 0.85, 1))
        root.add_widget(self.response_label)

        self.transcript_label = wrapped_label("", color=(0.2, 0.2, 0.2, 1))
        root.add_widget(self.transcript_label)

        self.mic_button = Button(text='Hablar', size_hint_y=None, height=dp(90), bold=True)
        self.mic_button.bind(on_release=lambda *_: self.controller.toggle_listening())
        root.add_widget(self.mic_button)

        scroll = ScrollView()
        self.section_panel = GridLayout(cols=1, spacing=dp(8), size_hint_y=None, padding=dp(4))
        self.section_panel.bind(minimum_height=self.section_panel.setter('height'))
        scroll.add_widget(self.section_panel)
        root.add_widget(scroll)

        self.add_widget(root)
        self.controller.add_listener(self.on_session_update)
        self.on_session_update(self.controller.state, self.controller.phase)

    # ---------- Session updates ----------
    def on_session_update(self, state, phase):
        self.response_label.text = state.last_response
        self.transcript_label.text = f"Dijiste: {state.last_transcript}" if state.last_transcript else ""

        if phase is SessionPhase.LISTENING:
            self.mic_button.text = 'Detener'
            self.mic_button.background_color = (0.94, 0.27, 0.27, 1)
        elif phase is SessionPhase.PROCESSING:
            self.mic_button.text = 'Procesando...'
            self.mic_button.background_color = (0.6, 0.6, 0.6, 1)
        else:
            self.mic_button.text = 'Hablar'
            self.mic_button.background_color = (0.23, 0.51, 0.96, 1)
        self.mic_button.disabled = phase in (SessionPhase.PROCESSING, SessionPhase.UNSUPPORTED)

        if state.active_section != self._rendered_section or state.active_section is SectionId.RECIPES:
            self.render_section()

    # ---------- Section panel ----------
    def render_section(self):
        section = self.controller.state.active_section
        self._rendered_section = section
        panel = self.section_panel
        panel.clear_widgets()

        panel.add_widget(wrapped_label(SECTION_TITLES.get(section, ''), bold=True))
        renderer = getattr(self, f"_render_{section.name.lower()}", None)
        if renderer:
            renderer(panel)

        if section is not SectionId.HOME:
            panel.add_widget(self._button('Volver al Inicio', lambda: self.controller.navigate(SectionId.HOME)))

    def _button(self, text, action, height=60):
        button = Button(text=text, size_hint_y=None, height=dp(height))
        button.bind(on_release=lambda *_: action())
        return button

    def _render_home(self, panel):
        for label, section in HOME_SHORTCUTS:
            panel.add_widget(self._button(label, lambda s=section: self.controller.navigate(s)))

    def _render_video_calls(self, panel):
        for name in self.records.loved_ones:
            panel.add_widget(self._button(
                f"Llamar a {name}", lambda n=name: self.controller.report(self.records.call_loved_one(n))
            ))

    def _render_messages(self, panel):
        panel.add_widget(self._button('Nuevo mensaje', lambda: self._open_form(
            'Enviar mensaje', ['Destinatario', 'Mensaje'], self.records.send_message, 'Mensaje enviado.'
        )))
        for message in self.records.messages:
            panel.add_widget(wrapped_label(f"Para {message.recipient}: {message.text}"))

    def _render_reminders(self, panel):
        panel.add_widget(self._button('Nuevo recordatorio', lambda: self._open_form(
            'Añadir recordatorio', ['Recordatorio'], self.records.add_reminder, 'Recordatorio añadido.'
        )))
        for reminder in self.records.reminders:
            mark = '✓ ' if reminder.completed else ''
            panel.add_widget(self._button(
                f"{mark}{reminder.text}", lambda r=reminder.id: self._toggle_reminder(r)
            ))

    def _render_activities(self, panel):
        for activity in self.records.activities:
            panel.add_widget(wrapped_label(f"{activity.title}: {activity.when}"))

    def _render_emergency(self, panel):
        button = self._button('Llamar a Emergencias', lambda: self.controller.report(self.records.emergency_call()),
                              height=100)
        button.background_color = (0.86, 0.15, 0.15, 1)
        panel.add_widget(button)

    def _render_recipes(self, panel):
        recipe = self.controller.state.pending_recipe
        if recipe is None:
            panel.add_widget(wrapped_label('Pídeme una receta, por ejemplo: "Dame una receta de pollo".'))
            return

        panel.add_widget(wrapped_label(recipe.name, bold=True))
        panel.add_widget(wrapped_label('Ingredientes:\n' + '\n'.join(f"• {i}" for i in recipe.ingredients)))
        panel.add_widget(wrapped_label('Instrucciones:\n' + '\n'.join(
            f"{n}. {step}" for n, step in enumerate(recipe.instructions, 1)
        )))

    def _render_medication(self, panel):
        panel.add_widget(self._button('Solicitar medicamento', lambda: self._open_form(
            'Solicitud de medicamento', ['Medicamento', 'Dosis', 'Frecuencia'],
            self.records.request_medication, 'Solicitud de medicamento registrada.'
        )))
        for request in self.records.medication_requests:
            panel.add_widget(wrapped_label(
                f"{request.medication_name} - {request.dosage} - {request.frequency} ({request.date})"
            ))

    def _render_appointments(self, panel):
        panel.add_widget(self._button('Agendar cita', lambda: self._open_form(
            'Nueva cita médica', ['Doctor', 'Fecha', 'Hora'], self.records.add_appointment, 'Cita médica agendada.'
        )))
        for appointment in self.records.appointments:
            panel.add_widget(wrapped_label(
                f"{appointment.doctor_name}: {appointment.appointment_date} a las {appointment.appointment_time}"
            ))

    def _render_nearby_hospitals(self, panel):
        panel.add_widget(self._button('Buscar hospitales', self._search_hospitals))
        for hospital in self.hospitals_shown:
            panel.add_widget(wrapped_label(
                f"{hospital.name}\n{hospital.address} · {hospital.distance} · Tel. {hospital.phone}"
            ))

    # ---------- Actions ----------
    def _open_form(self, title, fields, store, accepted_text):
        def submit(*values):
            result = store(*values)
            self.controller.report(result)
            self.render_section()
            return result

        RecordFormPopup(form_title=title, fields=fields, submit_callback=submit, accepted_text=accepted_text).open()

    def _toggle_reminder(self, reminder_id):
        if self.records.complete_reminder(reminder_id):
            self.render_section()

    def _search_hospitals(self):
        self.hospitals_shown, summary = self.records.nearby_hospitals()
        self.controller.report(summary)
        self.render_section()
