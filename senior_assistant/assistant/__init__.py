"""
Intent dispatch and remote text generation for the Senior Assistant
"""

from .dispatcher import SessionController
from .language_service import (
    LanguageServiceClient,
    GenerationRequest,
    GenerationReply,
    GenerationError,
    NetworkError,
    MalformedResponse,
    EmptyCandidate
)

__all__ = [
    'SessionController',
    'LanguageServiceClient',
    'GenerationRequest',
    'GenerationReply',
    'GenerationError',
    'NetworkError',
    'MalformedResponse',
    'EmptyCandidate'
]
