import math
import logging
from typing import List, Optional

from ..audio import AudioSource, decode, reencode, slice_segment
from ..constants import DEFAULT_SEGMENT_SECONDS, WAV_MIME_TYPE
from ..core.models import Transcript
from ..core.providers import ProgressReporter
from ..models import SegmentWindow
from .reconcile import reconcile
from .scribe import SegmentTranscriber

logger = logging.getLogger("MeetScribe.Transcribe")


def plan_segments(total_duration: float, segment_seconds: float = DEFAULT_SEGMENT_SECONDS) -> List[SegmentWindow]:
    """
    Partition [0, total_duration) into consecutive fixed-length windows.

    All windows but the last have length `segment_seconds`; the last one
    holds the remainder. Windows with no duration are skipped.
    """
    if segment_seconds <= 0:
        raise ValueError("segment_seconds must be greater than zero")
    if total_duration <= 0:
        return []

    windows = []
    count = math.ceil(total_duration / segment_seconds)
    for index in range(count):
        start = index * segment_seconds
        end = min(start + segment_seconds, total_duration)
        duration = end - start
        if duration <= 0:
            continue
        windows.append(SegmentWindow(index=index, start_seconds=start, duration_seconds=duration))
    return windows


class TranscriptionOrchestrator:
    """
    Drives decoding, chunking, per-segment transcription and timestamp
    reconciliation for one recording. Segments are processed strictly one
    after another.
    """

    def __init__(self, transcriber: SegmentTranscriber, progress: Optional[ProgressReporter] = None,
                 segment_seconds: float = DEFAULT_SEGMENT_SECONDS):
        if segment_seconds <= 0:
            raise ValueError("segment_seconds must be greater than zero")
        self.transcriber = transcriber
        self.progress = progress
        self.segment_seconds = segment_seconds

    def transcribe_audio(self, source: AudioSource) -> Transcript:
        """
        Transcribe a whole recording.

        Returns an empty transcript for silent-length (zero duration) input;
        deciding whether that is a failure is up to the caller.

        Raises:
            DecodeError: The input could not be decoded.
            ModelResponseError, TransportError: A segment failed; nothing is returned.
        """
        self._report("Decoding audio file...")
        audio = decode(source)
        logger.info(f"Decoded {audio.duration_seconds:.2f}s of audio "
                     f"({audio.channel_count} channel(s) @ {audio.sample_rate} Hz)")

        windows = plan_segments(audio.duration_seconds, self.segment_seconds)
        total = math.ceil(audio.duration_seconds / self.segment_seconds) if audio.duration_seconds > 0 else 0
        lines = []
        incomplete = []

        for window in windows:
            self._report(f"Transcribing chunk {window.index + 1} of {total}...")
            segment = slice_segment(audio, window)
            blob = reencode(segment.channel_data, segment.sample_rate)
            logger.info(f"Chunk {window.index + 1}/{total}: start={window.start_seconds:.2f}s, "
                        f"duration={window.duration_seconds:.2f}s, {len(blob)} bytes")

            result = self.transcriber.transcribe(blob, mime_type=WAV_MIME_TYPE)
            if result.repaired:
                logger.warning(f"Chunk {window.index + 1} was truncated by the model; its tail may be missing.")
                incomplete.append(window.index)

            lines.extend(reconcile(segment.start_offset_seconds, result.lines))
            logger.debug(f"Chunk {window.index + 1}: {len(result.lines)} line(s)")

        self._report("Combining transcripts...")
        transcript = Transcript(lines=lines, incomplete_segments=incomplete, duration_seconds=audio.duration_seconds)
        logger.info(f"Transcription finished: {len(transcript)} line(s) from {len(windows)} chunk(s)")
        return transcript

    def _report(self, message: str) -> None:
        if self.progress is None:
            return
        try:
            self.progress.report(message)
        except Exception as e:
            # Observational only; never let the sink break the run
            logger.warning(f"Progress reporter failed: {e}")
