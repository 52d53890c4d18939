import itertools
import logging
from datetime import datetime
from typing import Callable, List, Tuple

from .models import Message, Reminder, MedicationRequest, Appointment, Hospital, Activity

logger = logging.getLogger(__name__)


LOVED_ONES = ['Juan', 'María', 'Ana']

# No geolocation: fixed sample list shown in the hospitals section
SIMULATED_HOSPITALS = [
    Hospital('Hospital Central', 'Calle Principal 123', '2.5 km', '555-1234'),
    Hospital('Clínica del Valle', 'Avenida Siempre Viva 45', '4.1 km', '555-5678'),
    Hospital('Centro Médico San Juan', 'Plaza Mayor s/n', '7.8 km', '555-9012'),
]

WEEKLY_ACTIVITIES = [
    Activity('Caminata en el parque', 'Lunes 10 AM'),
    Activity('Taller de pintura', 'Miércoles 3 PM'),
    Activity('Club de lectura', 'Viernes 11 AM'),
]


class RecordBook:
    """
    In-memory store for the records the user creates from the section forms.
    Lives as long as the session; nothing is written to disk.

    Every public operation returns the text the assistant should say back.
    """

    def __init__(self, hospitals: List[Hospital] = None, today: Callable[[], datetime] = datetime.now):
        self.messages: List[Message] = []
        self.reminders: List[Reminder] = []
        self.medication_requests: List[MedicationRequest] = []
        self.appointments: List[Appointment] = []
        self.hospitals = list(SIMULATED_HOSPITALS if hospitals is None else hospitals)
        self.activities = list(WEEKLY_ACTIVITIES)
        self.loved_ones = list(LOVED_ONES)
        self._today = today
        self._ids = itertools.count(1)

    # ---------- Messages ----------
    def send_message(self, recipient: str, text: str) -> str:
        recipient = (recipient or "").strip()
        text = (text or "").strip()
        if not recipient or not text:
            return 'Por favor, ingresa el destinatario y el mensaje.'

        self.messages.append(Message(recipient=recipient, text=text))
        logger.info(f"Message stored ({len(self.messages)} in session)")
        return 'Mensaje enviado.'

    # ---------- Reminders ----------
    def add_reminder(self, text: str) -> str:
        text = (text or "").strip()
        if not text:
            return 'Por favor, ingresa el recordatorio.'

        self.reminders.append(Reminder(id=next(self._ids), text=text))
        logger.info(f"Reminder stored ({len(self.reminders)} in session)")
        return 'Recordatorio añadido.'

    def complete_reminder(self, reminder_id: int) -> bool:
        """Toggle the completed flag. Returns False for an unknown id."""
        for reminder in self.reminders:
            if reminder.id == reminder_id:
                reminder.completed = not reminder.completed
                return True
        logger.warning(f"Reminder {reminder_id} not found")
        return False

    # ---------- Medication ----------
    def request_medication(self, medication_name: str, dosage: str, frequency: str) -> str:
        fields = [(medication_name or "").strip(), (dosage or "").strip(), (frequency or "").strip()]
        if not all(fields):
            return 'Por favor, completa todos los campos para la solicitud de medicamento.'

        self.medication_requests.append(MedicationRequest(
            medication_name=fields[0],
            dosage=fields[1],
            frequency=fields[2],
            date=self._today().strftime("%d/%m/%Y")
        ))
        logger.info("Medication request stored")
        return 'Solicitud de medicamento registrada.'

    # ---------- Appointments ----------
    def add_appointment(self, doctor_name: str, appointment_date: str, appointment_time: str) -> str:
        fields = [(doctor_name or "").strip(), (appointment_date or "").strip(), (appointment_time or "").strip()]
        if not all(fields):
            return 'Por favor, completa todos los campos para la cita médica.'

        self.appointments.append(Appointment(
            id=next(self._ids),
            doctor_name=fields[0],
            appointment_date=fields[1],
            appointment_time=fields[2]
        ))
        logger.info("Appointment stored")
        return 'Cita médica agendada.'

    # ---------- Calls (stubs, no telephony) ----------
    def call_loved_one(self, name: str) -> str:
        return f"Llamando a {name}..."

    def emergency_call(self) -> str:
        return 'Llamando a servicios de emergencia. Mantén la calma.'

    # ---------- Hospitals ----------
    def nearby_hospitals(self) -> Tuple[List[Hospital], str]:
        """Return the hospital list and the sentence that summarizes it."""
        if not self.hospitals:
            return [], ('No se encontraron hospitales cercanos. Asegúrate de tener el GPS activado '
                        'y de permitir el acceso a tu ubicación.')

        hospital_list = ', '.join(f"{h.name} a {h.distance}" for h in self.hospitals)
        return list(self.hospitals), (
            f"Los hospitales más cercanos son: {hospital_list}. "
            "Para una búsqueda precisa, permite el acceso a tu ubicación."
        )
