"""
Runtime configuration for the Senior Assistant.

Loads settings from environment variables. The language-service key is
never stored in the code base.
"""
import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_MODEL_PATH = os.path.join('assets', 'models', 'vosk-model-small-es-0.42')


def _parse_int_env(key: str, default: int) -> int:
    """
    Parse integer environment variable, stripping comments and whitespace.

    - "20  # seconds" -> 20
    - "abc" -> default
    """
    value = os.environ.get(key)
    if not value:
        return default

    if "#" in value:
        value = value.split("#")[0]
    value = value.strip()

    if not value:
        return default

    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class AssistantConfig:
    """Assistant configuration."""

    locale: str = "es-ES"

    # Remote text generation
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    request_timeout: int = 20

    # Speech
    vosk_model_path: str = DEFAULT_MODEL_PATH
    speech_rate: int = 160

    log_file: str = "senior_assistant.log"

    @classmethod
    def from_env(cls) -> "AssistantConfig":
        """Load configuration from environment variables."""
        return cls(
            locale=os.environ.get("ASSISTANT_LOCALE", "es-ES"),
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            gemini_model=os.environ.get("GEMINI_MODEL", "gemini-2.0-flash"),
            gemini_base_url=os.environ.get(
                "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
            ).rstrip('/'),
            request_timeout=_parse_int_env("GEMINI_TIMEOUT_SECONDS", default=20),
            vosk_model_path=os.environ.get("VOSK_MODEL_PATH", DEFAULT_MODEL_PATH),
            speech_rate=_parse_int_env("ASSISTANT_SPEECH_RATE", default=160),
            log_file=os.environ.get("ASSISTANT_LOG_FILE", "senior_assistant.log"),
        )


def get_config() -> AssistantConfig:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = AssistantConfig.from_env()
    return _config


# Global config instance (lazy loaded)
_config: Optional[AssistantConfig] = None
