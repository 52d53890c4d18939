from datetime import datetime

import pytest

from senior_assistant.data.models import Recipe
from senior_assistant.data.records import RecordBook


class TestRecordBook:
    @pytest.fixture
    def records(self):
        return RecordBook(today=lambda: datetime(2026, 10, 19))

    @pytest.mark.integration
    def test_send_message(self, records):
        assert records.send_message("Juan", "Llego a las cinco") == 'Mensaje enviado.'
        assert records.messages[0].recipient == "Juan"
        assert records.messages[0].type == 'sent'

    @pytest.mark.integration
    def test_send_message_requires_both_fields(self, records):
        assert records.send_message("Juan", "  ") == 'Por favor, ingresa el destinatario y el mensaje.'
        assert records.messages == []

    @pytest.mark.integration
    def test_add_and_complete_reminder(self, records):
        assert records.add_reminder("Tomar la pastilla") == 'Recordatorio añadido.'
        reminder = records.reminders[0]
        assert reminder.completed is False

        assert records.complete_reminder(reminder.id) is True
        assert reminder.completed is True
        assert records.complete_reminder(999) is False

    @pytest.mark.integration
    def test_empty_reminder(self, records):
        assert records.add_reminder("") == 'Por favor, ingresa el recordatorio.'
        assert records.reminders == []

    @pytest.mark.integration
    def test_medication_request_is_dated(self, records):
        result = records.request_medication("Paracetamol", "500 mg", "Cada 8 horas")
        assert result == 'Solicitud de medicamento registrada.'
        assert records.medication_requests[0].date == "19/10/2026"

    @pytest.mark.integration
    def test_medication_request_requires_all_fields(self, records):
        result = records.request_medication("Paracetamol", "", "Cada 8 horas")
        assert result == 'Por favor, completa todos los campos para la solicitud de medicamento.'
        assert records.medication_requests == []

    @pytest.mark.integration
    def test_add_appointment(self, records):
        assert records.add_appointment("Dra. Pérez", "2026-11-02", "10:30") == 'Cita médica agendada.'
        assert records.appointments[0].doctor_name == "Dra. Pérez"

    @pytest.mark.integration
    def test_appointment_requires_all_fields(self, records):
        assert records.add_appointment("", "2026-11-02", "10:30") == \
            'Por favor, completa todos los campos para la cita médica.'

    @pytest.mark.integration
    def test_ids_are_unique(self, records):
        records.add_reminder("Caminar")
        records.add_appointment("Dr. Gómez", "2026-11-02", "9:00")
        records.add_reminder("Llamar a Ana")
        ids = [r.id for r in records.reminders] + [a.id for a in records.appointments]
        assert len(set(ids)) == 3

    @pytest.mark.integration
    def test_calls(self, records):
        assert records.call_loved_one("María") == "Llamando a María..."
        assert "emergencia" in records.emergency_call()
        assert records.loved_ones == ['Juan', 'María', 'Ana']

    @pytest.mark.integration
    def test_nearby_hospitals(self, records):
        hospitals, summary = records.nearby_hospitals()
        assert len(hospitals) == 3
        assert summary.startswith("Los hospitales más cercanos son: Hospital Central a 2.5 km")

    @pytest.mark.integration
    def test_no_hospitals(self):
        hospitals, summary = RecordBook(hospitals=[]).nearby_hospitals()
        assert hospitals == []
        assert summary.startswith("No se encontraron hospitales cercanos")

    @pytest.mark.security
    def test_record_content_not_logged(self, records, caplog):
        with caplog.at_level('INFO'):
            records.send_message("Juan", "Mi clave del banco es 4321")
            records.add_reminder("Cita con el psiquiatra")
        assert "4321" not in caplog.text
        assert "psiquiatra" not in caplog.text


class TestRecipe:
    def test_from_json(self, recipe_json):
        recipe = Recipe.from_json(recipe_json)
        assert recipe.name == "Ensalada"
        assert recipe.ingredients == ["Lechuga", "Tomate"]
        assert recipe.instructions == ["Cortar", "Mezclar"]

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {"recipeName": "", "ingredients": [], "instructions": []},
        {"recipeName": "Sopa", "ingredients": "agua", "instructions": []},
        {"recipeName": "Sopa", "ingredients": [], "instructions": [1, 2]},
        {"ingredients": [], "instructions": []},
    ])
    def test_invalid_payload(self, payload):
        with pytest.raises(ValueError):
            Recipe.from_json(payload)
