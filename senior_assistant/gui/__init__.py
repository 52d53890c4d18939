"""
GUI components for the Senior Assistant
"""

from .main_screen import MainScreen
from .popups import BasePopup, RecordFormPopup

__all__ = [
    'MainScreen',
    'BasePopup',
    'RecordFormPopup'
]
