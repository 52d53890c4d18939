"""
Client for the remote text-generation service (Gemini `generateContent`).

One HTTP POST per call and no retries. Every failure is raised as a
GenerationError subclass; callers turn it into a spoken apology.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Base class for language-service failures."""
    kind = 'generation'


class NetworkError(GenerationError):
    """Transport, connectivity or HTTP status failure."""
    kind = 'network'


class MalformedResponse(GenerationError):
    """Body is not JSON, or the content does not match the requested schema."""
    kind = 'malformed'


class EmptyCandidate(GenerationError):
    """Well-formed response without usable text."""
    kind = 'empty'


RECIPE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "recipeName": {"type": "STRING"},
        "ingredients": {"type": "ARRAY", "items": {"type": "STRING"}},
        "instructions": {"type": "ARRAY", "items": {"type": "STRING"}}
    },
    "propertyOrdering": ["recipeName", "ingredients", "instructions"]
}


@dataclass
class GenerationRequest:
    prompt: str
    response_schema: Optional[dict] = None

    def to_payload(self) -> dict:
        payload = {"contents": [{"role": "user", "parts": [{"text": self.prompt}]}]}
        if self.response_schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": self.response_schema
            }
        return payload


@dataclass
class GenerationReply:
    text: str
    data: Any = None  # Parsed JSON when the request carried a schema


def matches_schema(value, schema: dict) -> bool:
    """
    Check `value` against the subset of the OpenAPI-style schema the
    service accepts (OBJECT / ARRAY / STRING / NUMBER / INTEGER / BOOLEAN).
    Every declared object property is treated as required.
    """
    schema_type = str(schema.get("type", "")).upper()

    if schema_type == "OBJECT":
        if not isinstance(value, dict):
            return False
        return all(
            name in value and matches_schema(value[name], sub)
            for name, sub in schema.get("properties", {}).items()
        )
    if schema_type == "ARRAY":
        if not isinstance(value, list):
            return False
        items = schema.get("items")
        return items is None or all(matches_schema(v, items) for v in value)
    if schema_type == "STRING":
        return isinstance(value, str)
    if schema_type == "INTEGER":
        return isinstance(value, int) and not isinstance(value, bool)
    if schema_type == "NUMBER":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if schema_type == "BOOLEAN":
        return isinstance(value, bool)
    return True


class LanguageServiceClient:
    def __init__(self, api_key: Optional[str], model: str = "gemini-2.0-flash",
                 base_url: str = "https://generativelanguage.googleapis.com/v1beta",
                 timeout: int = 20, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

        if not self.api_key:
            logger.warning("GEMINI_API_KEY not set: remote answers will use fallback texts")

    @classmethod
    def from_config(cls, config) -> "LanguageServiceClient":
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            timeout=config.request_timeout
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, request: GenerationRequest) -> GenerationReply:
        """
        Send one generation request.

        Raises NetworkError, MalformedResponse or EmptyCandidate.
        """
        if not self.api_key:
            raise NetworkError("No API key configured for the language service")

        try:
            response = self.session.post(
                self.endpoint,
                params={"key": self.api_key},
                json=request.to_payload(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(f"Language service unreachable: {type(e).__name__}") from e

        if response.status_code != 200:
            raise NetworkError(f"Language service returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponse("Response body is not JSON") from e

        text = self._extract_text(body)
        logger.debug(f"Generated {len(text)} characters")

        if request.response_schema is None:
            return GenerationReply(text=text)

        try:
            data = json.loads(text)
        except ValueError as e:
            raise MalformedResponse("Candidate text is not JSON") from e

        if not matches_schema(data, request.response_schema):
            raise MalformedResponse("Candidate JSON does not match the response schema")

        return GenerationReply(text=text, data=data)

    def _extract_text(self, body) -> str:
        """candidates[0].content.parts[0].text"""
        if not isinstance(body, dict):
            raise MalformedResponse("Response body is not an object")

        candidates = body.get("candidates")
        if candidates is None or candidates == []:
            raise EmptyCandidate("Response has no candidates")
        if not isinstance(candidates, list):
            raise MalformedResponse("'candidates' is not a list")

        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not parts or not isinstance(parts, list) or not isinstance(parts[0], dict):
            raise EmptyCandidate("First candidate has no content parts")

        text = parts[0].get("text")
        if text is None:
            raise EmptyCandidate("First part has no text")
        if not isinstance(text, str):
            raise MalformedResponse("Candidate text is not a string")
        if not text.strip():
            raise EmptyCandidate("Candidate text is empty")
        return text
