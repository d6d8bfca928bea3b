import json
import logging
from typing import Any, List

from pydantic import ValidationError

from ..constants import (
    FINISH_REASON_MAX_TOKENS, FINISH_REASON_SAFETY, FINISH_REASON_STOP, WAV_MIME_TYPE
)
from ..core.errors import (
    EmptyResponseError, NoContentError, SafetyBlockedError, SegmentTooLongError,
    UnrepairableResponseError
)
from ..core.models import TranscriptLine
from ..core.providers import GenerationResult, MediaPart, ModelClient
from ..models import SegmentResult
from ..prompts import TRANSCRIPTION_PROMPT, TRANSCRIPT_SCHEMA
from ..response_parser import ResponseParser

logger = logging.getLogger("MeetScribe.Scribe")


class SegmentTranscriber:
    """Transcribes one self-contained audio segment with a single model request."""

    def __init__(self, client: ModelClient, prompt: str = TRANSCRIPTION_PROMPT):
        self.client = client
        self.prompt = prompt

    def transcribe(self, segment_blob: bytes, mime_type: str = WAV_MIME_TYPE) -> SegmentResult:
        """
        Transcribe a segment.

        Returns:
            SegmentResult with timestamps relative to the segment start.
            `repaired` is set when the output was truncated and only its
            complete prefix could be kept.

        Raises:
            SafetyBlockedError, SegmentTooLongError, EmptyResponseError: No output.
            UnrepairableResponseError: Malformed output that could not be salvaged.
            TransportError: Request failed.
        """
        result = self.client.generate(
            [MediaPart(data=segment_blob, mime_type=mime_type), self.prompt],
            TRANSCRIPT_SCHEMA,
        )

        if not result.text:
            raise classify_empty_response(result, "Transcription")

        if result.finish_reason and result.finish_reason != FINISH_REASON_STOP:
            logger.warning(f"Transcription finished with non-standard reason: {result.finish_reason}. "
                           f"This could indicate the response was truncated.")

        repaired = False
        try:
            payload = ResponseParser.parse_json(result.text)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON response during transcription: {e}")
            logger.debug(f"Problematic JSON text received for transcription: {result.text}")
            payload = ResponseParser.repair_json_array(result.text)
            repaired = True
            logger.warning("The transcription of this segment was incomplete and had to be repaired. "
                           "The end of the segment may be missing.")

        return SegmentResult(lines=_to_lines(payload), repaired=repaired)


def classify_empty_response(result: GenerationResult, action: str) -> NoContentError:
    """Map the stated reason for a missing answer onto the error taxonomy."""
    reason = result.finish_reason
    logger.error(f"{action} failed. Finish Reason: {reason or 'N/A'}. "
                 f"Block Reason: {result.block_reason or 'N/A'}. Message: {result.finish_message or 'N/A'}")

    if reason == FINISH_REASON_SAFETY or result.block_reason:
        error_cls, message = SafetyBlockedError, f"{action} failed because the content was blocked for safety reasons."
    elif reason == FINISH_REASON_MAX_TOKENS:
        error_cls, message = SegmentTooLongError, f"{action} failed because the audio is too long, exceeding the model's token limit."
    else:
        error_cls, message = EmptyResponseError, f"The model returned no content during {action.lower()}."
    return error_cls(message, finish_reason=reason, finish_message=result.finish_message)


def _to_lines(payload: Any) -> List[TranscriptLine]:
    if not isinstance(payload, list):
        raise UnrepairableResponseError(f"Expected a JSON array of transcript lines, got {type(payload).__name__}.")
    try:
        return [TranscriptLine.model_validate(item) for item in payload]
    except ValidationError as e:
        raise UnrepairableResponseError(f"Transcript lines do not match the schema: {e}") from e
