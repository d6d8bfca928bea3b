import logging
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from google.api_core import exceptions
from google.generativeai.types import HarmCategory, HarmBlockThreshold

from ...core.errors import TransportError
from ...core.logger import APILogger
from ...core.models import DEFAULT_MODEL
from ...core.providers import Content, GenerationResult, MediaPart, ModelClient
from . import GeminiConfig

logger = logging.getLogger("MeetScribe.Plugin.Gemini")

RELAXED_SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
}


class GeminiClient(ModelClient):
    """
    Explicitly constructed connection to the Gemini API.

    One instance is created by the caller and handed to every component
    that talks to the model.
    """

    def __init__(self, provider_config: Optional[GeminiConfig] = None, model: str = DEFAULT_MODEL,
                 api_logger: Optional[APILogger] = None):
        self.gemini_config = provider_config or GeminiConfig()
        self.model_name = model
        self.api_logger = api_logger

        if not self.gemini_config.api_key:
            raise ValueError("Gemini API Key not found in config or environment (GEMINI_API_KEY).")
        genai.configure(api_key=self.gemini_config.api_key.get_secret_value())

    def generate(self, contents: List[Content], schema: Dict[str, Any]) -> GenerationResult:
        model = genai.GenerativeModel(self.model_name)
        parts = [self._to_part(c) for c in contents]

        generation_config = {
            "response_mime_type": "application/json",
            "response_schema": schema,
        }
        if self.gemini_config.temperature is not None:
            generation_config["temperature"] = self.gemini_config.temperature

        kwargs = {}
        if self.gemini_config.relax_safety_filters:
            kwargs["safety_settings"] = RELAXED_SAFETY_SETTINGS

        log_request = {"model": self.model_name, "contents": parts, "response_schema": schema}
        logger.debug(f"Sending request to {self.model_name} ({len(parts)} part(s))")

        try:
            response = model.generate_content(
                parts,
                generation_config=generation_config,
                # No SDK-level retries; retry policy is left to the caller
                request_options={"timeout": self.gemini_config.timeout, "retry": None},
                **kwargs
            )
        except exceptions.GoogleAPIError as e:
            logger.error(f"Error generating content: {e}")
            if self.api_logger:
                self.api_logger.log("gemini", "generate_content", log_request, None, error=str(e))
            raise TransportError(f"Gemini request failed: {e}") from e

        result = self._to_result(response)
        if self.api_logger:
            self.api_logger.log("gemini", "generate_content", log_request, {
                "finish_reason": result.finish_reason,
                "block_reason": result.block_reason,
                "text": result.text,
            })
        logger.debug(f"Received response: finish_reason={result.finish_reason}, "
                     f"tokens in/out={result.input_tokens}/{result.output_tokens}")
        return result

    @staticmethod
    def _to_part(content: Content) -> Any:
        if isinstance(content, MediaPart):
            return {"mime_type": content.mime_type, "data": content.data}
        return content

    @staticmethod
    def _to_result(response: Any) -> GenerationResult:
        try:
            text = response.text
        except ValueError as e:
            # SDK raises when the candidate carries no parts (blocked or empty)
            logger.warning(f"Response has no text (maybe blocked?): {e}")
            text = None

        finish_reason = None
        finish_message = None
        candidates = getattr(response, "candidates", None) or []
        if candidates:
            finish_reason = _enum_name(getattr(candidates[0], "finish_reason", None))
            finish_message = getattr(candidates[0], "finish_message", None) or None

        prompt_feedback = getattr(response, "prompt_feedback", None)
        block_reason = _enum_name(getattr(prompt_feedback, "block_reason", None))

        input_tokens = output_tokens = 0
        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            input_tokens = getattr(usage, "prompt_token_count", 0) or 0
            output_tokens = getattr(usage, "candidates_token_count", 0) or 0

        return GenerationResult(
            text=text or None,
            finish_reason=finish_reason,
            finish_message=finish_message,
            block_reason=block_reason,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )


def _enum_name(value: Any) -> Optional[str]:
    """Name of a proto enum value; None for unset/unspecified."""
    if value is None:
        return None
    name = getattr(value, "name", None) or str(value)
    if not name or name.endswith("UNSPECIFIED") or name == "0":
        return None
    return name
