"""
Senior Assistant package
Voice assistant for older adults: speak, get an answer, open the right section
"""

__version__ = "1.0.0"
__description__ = "Voice Assistant for Older Adults"

# The kivy app lives in senior_assistant.main and is not imported here.
