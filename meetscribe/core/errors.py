"""Exception hierarchy for the transcription and summary pipeline."""

from typing import Optional


class MeetScribeError(Exception):
    """Base class for every error raised by MeetScribe."""


class DecodeError(MeetScribeError):
    """The input audio could not be decoded (unknown container, corrupt data)."""


class TransportError(MeetScribeError):
    """The request never produced a model response (network, quota, auth)."""


class EmptyTranscriptError(MeetScribeError):
    """Transcription finished without producing a single line."""


class ModelResponseError(MeetScribeError):
    """The model answered, but the answer cannot be used."""


class NoContentError(ModelResponseError):
    """The model returned no output text at all."""

    def __init__(self, message: str, finish_reason: Optional[str] = None, finish_message: Optional[str] = None):
        super().__init__(message)
        self.finish_reason = finish_reason
        self.finish_message = finish_message


class SafetyBlockedError(NoContentError):
    pass


class SegmentTooLongError(NoContentError):
    pass


class EmptyResponseError(NoContentError):
    pass


class MalformedResponseError(ModelResponseError):
    """The output text is not valid JSON."""


class UnrepairableResponseError(MalformedResponseError):
    """The output was malformed and the repair pass could not salvage it."""


class InvalidSummaryShapeError(ModelResponseError):
    """Parsed summary JSON is missing required fields."""

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = missing or []
