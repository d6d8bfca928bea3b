from .reconcile import reconcile
from .scribe import SegmentTranscriber
from .transcribe import TranscriptionOrchestrator, plan_segments
from .summarize import SummaryRequester
from .meeting import MeetingProcessor
