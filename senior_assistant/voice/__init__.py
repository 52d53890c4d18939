"""
Voice processing components for the Senior Assistant
"""

from .stt_engine import SpeechToTextEngine, RecognitionUnsupported, RecognitionError
from .tts_engine import TextToSpeechEngine
from .intent_classifier import IntentClassifier, Intent, IntentType, classify

__all__ = [
    'SpeechToTextEngine',
    'RecognitionUnsupported',
    'RecognitionError',
    'TextToSpeechEngine',
    'IntentClassifier',
    'Intent',
    'IntentType',
    'classify'
]
