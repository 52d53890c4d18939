import logging
import os

from .config import get_config
from .voice.stt_engine import SpeechToTextEngine
from .voice.tts_engine import TextToSpeechEngine
from .voice.intent_classifier import IntentClassifier
from .assistant.dispatcher import SessionController
from .assistant.language_service import LanguageServiceClient
from .data.records import RecordBook
from .gui.main_screen import MainScreen

# Kivy imports
from kivy.app import App
from kivy.clock import Clock
from kivy.uix.screenmanager import ScreenManager
from kivy.core.window import Window

# Set minimum window size
Window.size = (550, 800)
Window.minimum_width, Window.minimum_height = 550, 800

logger = logging.getLogger(__name__)


def setup_logging(log_file: str):
    """File + console logging for the whole application."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def on_ui_thread(fn):
    """Run `fn` on the next frame of the kivy main loop."""
    Clock.schedule_once(lambda dt: fn(), 0)


class SeniorAssistantApp(App):
    title = 'Senior Connect'

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.config_values = get_config()
        self.screen_manager = None
        self.stt_engine = None
        self.tts_engine = None
        self.controller = None
        self.records = None

        # Global UI settings, large type for older adults
        self.font_family = 'Roboto'
        self.font_size = 22

    def _initialize_components(self):
        """
        Initialize speech engines, language service client, records and
        the session controller.
        """
        config = self.config_values
        model_path = config.vosk_model_path
        if not os.path.isabs(model_path):
            project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
            model_path = os.path.join(project_root, model_path)

        self.stt_engine = SpeechToTextEngine(model_path, schedule=on_ui_thread)
        self.tts_engine = TextToSpeechEngine(locale=config.locale, rate=config.speech_rate)
        self.records = RecordBook()
        self.controller = SessionController(
            stt_engine=self.stt_engine,
            tts_engine=self.tts_engine,
            language_client=LanguageServiceClient.from_config(config),
            classifier=IntentClassifier(),
            schedule=on_ui_thread
        )
        logger.info("All components initialized")

    def build(self):
        """Build the main application."""
        Window.clearcolor = (0.88, 0.92, 1, 1)
        self._initialize_components()

        self.screen_manager = ScreenManager()
        self.screen_manager.add_widget(MainScreen(self.controller, self.records, name='main'))
        return self.screen_manager

    def on_start(self):
        if self.controller:
            self.tts_engine.speak(self.controller.state.last_response)

    def on_stop(self):
        """Clean up resources on app exit."""
        if self.controller:
            self.controller.stop_activation()
        if self.tts_engine:
            self.tts_engine.stop()


def main():
    setup_logging(get_config().log_file)
    SeniorAssistantApp().run()


if __name__ == '__main__':
    main()
