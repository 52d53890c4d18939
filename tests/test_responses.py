from datetime import datetime

import pytest

from senior_assistant.assistant import responses


class TestResponses:
    @pytest.mark.parametrize("moment, expected", [
        (datetime(2026, 10, 19, 0, 0), "Son las 0 y 0 minutos."),
        (datetime(2026, 10, 19, 17, 45), "Son las 17 y 45 minutos."),
    ])
    def test_tell_time(self, moment, expected):
        assert responses.tell_time(moment) == expected

    @pytest.mark.parametrize("day, expected", [
        (datetime(2026, 10, 19), "Hoy es lunes, 19 de octubre de 2026."),
        (datetime(2026, 1, 4), "Hoy es domingo, 4 de enero de 2026."),
        (datetime(2024, 2, 29), "Hoy es jueves, 29 de febrero de 2024."),
    ])
    def test_tell_date(self, day, expected):
        assert responses.tell_date(day) == expected

    def test_recipe_prompt_default_topic(self):
        assert "una receta saludable y fácil" in responses.recipe_prompt("")
        assert "pollo" in responses.recipe_prompt("pollo")

    def test_emotional_prompt_quotes_user(self):
        prompt = responses.emotional_support_prompt("estoy solo")
        assert '"estoy solo"' in prompt
        assert "español" in prompt

    def test_every_section_has_announcement(self):
        from senior_assistant.session import SectionId
        assert set(responses.SECTION_ANNOUNCEMENTS) == set(SectionId)
