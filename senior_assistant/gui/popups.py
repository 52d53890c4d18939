import logging
from kivy.uix.popup import Popup
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.label import Label
from kivy.uix.button import Button
from kivy.uix.textinput import TextInput
from kivy.metrics import dp
from kivy.properties import StringProperty, NumericProperty

logger = logging.getLogger(__name__)


class BasePopup(Popup):
    """
    Base class for popups with common font behaviour.

    - font_family and font_size come from app defaults.
    - on_open applies font family everywhere and font size to non-button text.
    """
    font_family = StringProperty('Roboto')
    font_size = NumericProperty(20)

    def on_open(self):
        """
        Apply global fonts to popup contents when opened.
        """
        from kivy.app import App

        app = App.get_running_app()
        if app:
            self.font_family = getattr(app, "font_family", "Roboto")
            self.font_size = getattr(app, "font_size", 20)

        for child in self.walk():
            if hasattr(child, 'font_name') and self.font_family:
                child.font_name = self.font_family
            if (
                hasattr(child, 'font_size')
                and hasattr(child, 'text')
                and not isinstance(child, Button)
            ):
                child.font_size = dp(self.font_size)


class RecordFormPopup(BasePopup):
    """
    Form with one text input per field. `submit_callback` receives the
    values in field order and returns the text the assistant says; the
    popup closes only when the record was accepted.
    """

    def __init__(self, form_title, fields, submit_callback, accepted_text, **kwargs):
        super().__init__(title=form_title, size_hint=(0.9, 0.8), **kwargs)
        self.submit_callback = submit_callback
        self.accepted_text = accepted_text
        self.inputs = []

        layout = BoxLayout(orientation='vertical', padding=dp(12), spacing=dp(8))
        for hint in fields:
            text_input = TextInput(hint_text=hint, multiline=False, size_hint_y=None, height=dp(48))
            self.inputs.append(text_input)
            layout.add_widget(text_input)

        self.feedback = Label(text="", size_hint_y=None, height=dp(40))
        layout.add_widget(self.feedback)

        buttons = BoxLayout(size_hint_y=None, height=dp(56), spacing=dp(8))
        buttons.add_widget(Button(text='Guardar', on_release=lambda *_: self.submit()))
        buttons.add_widget(Button(text='Cancelar', on_release=lambda *_: self.dismiss()))
        layout.add_widget(buttons)
        self.content = layout

    def submit(self):
        values = [text_input.text for text_input in self.inputs]
        result = self.submit_callback(*values)
        if result == self.accepted_text:
            self.dismiss()
        else:
            self.feedback.text = result

