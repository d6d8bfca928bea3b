import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from ..audio import AudioSource
from ..core.errors import EmptyTranscriptError
from ..core.models import Meeting, MeetingStatus, TranslatedSummary
from .summarize import SummaryRequester
from .transcribe import TranscriptionOrchestrator

logger = logging.getLogger("MeetScribe.Meeting")

DEFAULT_TITLE = "Recorded Meeting"


def format_duration(seconds: float) -> str:
    """Format seconds as MM:SS, or H:MM:SS for an hour or more."""
    total = max(0, int(seconds))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


class MeetingProcessor:
    """
    Caller-side flow: transcribe a recording, summarize it and assemble the
    meeting record. Nothing is persisted here.
    """

    def __init__(self, orchestrator: Optional[TranscriptionOrchestrator], summarizer: SummaryRequester):
        self.orchestrator = orchestrator
        self.summarizer = summarizer

    def process(self, source: AudioSource, title: Optional[str] = None,
                started_at: Optional[datetime] = None) -> Meeting:
        """
        Raises:
            EmptyTranscriptError: Transcription succeeded but produced no lines.
            Any error of the transcription or summary stages, unchanged.
        """
        transcript = self.orchestrator.transcribe_audio(source)
        if not transcript.lines:
            raise EmptyTranscriptError("Transcription failed or returned no content.")
        if transcript.is_partial:
            logger.warning(f"Transcript is incomplete for chunk(s) "
                           f"{', '.join(str(i + 1) for i in transcript.incomplete_segments)}. Please review carefully.")

        summary = self.summarizer.summarize(transcript.lines)

        duration_seconds = transcript.duration_seconds
        start = started_at or datetime.now(timezone.utc)
        return Meeting(
            id=f"meeting-{uuid.uuid4().hex[:12]}",
            title=title or self._title_for(source),
            start_time=start,
            end_time=start + timedelta(seconds=duration_seconds),
            duration=format_duration(duration_seconds),
            duration_seconds=duration_seconds,
            status=MeetingStatus.TRANSCRIBED,
            transcript=transcript.lines,
            summary=summary,
            incomplete_segments=transcript.incomplete_segments,
        )

    def translate(self, meeting: Meeting, language: str) -> Meeting:
        """Return a copy of the meeting carrying a translated summary."""
        if meeting.summary is None:
            raise ValueError("Cannot translate without an existing summary.")
        translated = self.summarizer.translate(meeting.summary, language)
        return meeting.model_copy(update={
            "status": MeetingStatus.TRANSLATED,
            "translated_summary": TranslatedSummary(language=language, summary=translated),
        })

    @staticmethod
    def _title_for(source: AudioSource) -> str:
        if isinstance(source, (str, Path)):
            return Path(source).stem or DEFAULT_TITLE
        return DEFAULT_TITLE

