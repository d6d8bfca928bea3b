import json
import logging
from typing import Any, Iterable

from pydantic import ValidationError

from ..core.errors import InvalidSummaryShapeError, MalformedResponseError
from ..core.models import MagicSummary, TranscriptLine
from ..core.providers import ModelClient
from ..prompts import (
    SUMMARY_REQUIRED_FIELDS, SUMMARY_SCHEMA, build_summary_prompt, build_translation_prompt
)
from ..response_parser import ResponseParser
from .scribe import classify_empty_response

logger = logging.getLogger("MeetScribe.Summarize")


class SummaryRequester:
    """Produces and translates the structured meeting summary."""

    def __init__(self, client: ModelClient):
        self.client = client

    def summarize(self, transcript: Iterable[TranscriptLine]) -> MagicSummary:
        """
        Generate a MagicSummary from a transcript.

        Raises:
            InvalidSummaryShapeError: Parsed output lacks a required field.
            MalformedResponseError: Output is not JSON.
            NoContentError: The model returned nothing.
        """
        prompt = build_summary_prompt(f"{line.speaker}: {line.text}" for line in transcript)
        payload = self._request(prompt, "Summary generation")
        summary = self._to_summary(payload)
        logger.info(f"Summary generated: {len(summary.action_items)} action item(s), "
                    f"{len(summary.key_decisions)} decision(s)")
        return summary

    def translate(self, summary: MagicSummary, target_language: str) -> MagicSummary:
        """
        Translate a summary into another language. The input summary is not modified.

        The translated payload goes through the same shape check as `summarize`.
        """
        prompt = build_translation_prompt(flatten_summary(summary), target_language)
        payload = self._request(prompt, f"Translation to {target_language}")
        translated = self._to_summary(payload)
        logger.info(f"Summary translated to {target_language}")
        return translated

    def _request(self, prompt: str, action: str) -> Any:
        result = self.client.generate([prompt], SUMMARY_SCHEMA)
        if not result.text:
            raise classify_empty_response(result, action)
        try:
            return ResponseParser.parse_json(result.text)
        except json.JSONDecodeError as e:
            logger.error(f"{action}: failed to parse JSON response: {e}")
            logger.debug(f"Response text: {result.text}")
            raise MalformedResponseError(f"{action} returned invalid JSON: {e}") from e

    @staticmethod
    def _to_summary(payload: Any) -> MagicSummary:
        if not isinstance(payload, dict):
            raise InvalidSummaryShapeError(f"Expected a JSON object, got {type(payload).__name__}.")

        missing = [name for name in SUMMARY_REQUIRED_FIELDS if name not in payload]
        if missing:
            raise InvalidSummaryShapeError(
                f"Invalid JSON structure received from summary API: missing {', '.join(missing)}.",
                missing=missing
            )
        try:
            return MagicSummary.model_validate(payload)
        except ValidationError as e:
            raise InvalidSummaryShapeError(f"Invalid JSON structure received from summary API: {e}") from e


def flatten_summary(summary: MagicSummary) -> str:
    decisions = "; ".join(
        f"{d.decision} (Rationale: {d.rationale or 'N/A'})" for d in summary.key_decisions
    )
    actions = "; ".join(f"{a.item} (Assignee: {a.assignee})" for a in summary.action_items)
    return (
        f"Executive Summary: {summary.executive_summary}\n"
        f"Key Decisions: {decisions}\n"
        f"Action Items: {actions}"
    )

