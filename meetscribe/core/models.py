from enum import Enum
from typing import Dict, List, Optional, Any, Tuple
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_MODEL = "gemini-2.5-flash"


class WireModel(BaseModel):
    """Base for models exchanged with the model API and written to disk (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# --- Transcript ---

class TranscriptLine(WireModel):
    speaker: str
    timestamp: str  # MM:SS, relative to its segment until reconciled
    text: str


class Transcript(WireModel):
    """
    Ordered transcript lines, chronological by insertion.

    Built once, after every segment has been transcribed; tuples keep it
    immutable from then on.
    """
    lines: Tuple[TranscriptLine, ...] = ()
    # Segments whose model output was truncated and repaired; their tail may be missing.
    incomplete_segments: Tuple[int, ...] = ()
    duration_seconds: float = 0.0

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_partial(self) -> bool:
        return bool(self.incomplete_segments)


# --- Summary ---

class ActionItem(WireModel):
    item: str
    assignee: str


class KeyDecision(WireModel):
    decision: str
    rationale: Optional[str] = None


class MagicSummary(WireModel):
    executive_summary: str
    action_items: List[ActionItem]
    key_decisions: List[KeyDecision]


class TranslatedSummary(WireModel):
    language: str
    summary: MagicSummary


# --- Meeting record ---

class MeetingStatus(str, Enum):
    PROCESSING = "Processing"
    TRANSCRIBED = "Transcribed"
    TRANSLATED = "Translated"


class Meeting(WireModel):
    id: str
    title: str
    start_time: datetime
    end_time: datetime
    duration: str
    duration_seconds: float
    status: MeetingStatus = MeetingStatus.PROCESSING
    transcript: List[TranscriptLine] = Field(default_factory=list)
    summary: Optional[MagicSummary] = None
    translated_summary: Optional[TranslatedSummary] = None
    incomplete_segments: List[int] = Field(default_factory=list)


# --- Configuration ---

class StageConfig(BaseModel):
    provider: str = "gemini"
    model: str = DEFAULT_MODEL


class PathsConfig(BaseModel):
    output: str = "./meetscribe-out"
    logs: Optional[str] = None


class JobConfiguration(BaseModel):
    segment_seconds: float = 59.0
    debug: bool = False
    output_mode: str = "standard"
    log_api_calls: bool = False
    transcribe: StageConfig = Field(default_factory=StageConfig)
    summarize: StageConfig = Field(default_factory=StageConfig)

    @field_validator("segment_seconds")
    @classmethod
    def _positive_segment(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("segment_seconds must be greater than zero")
        return value


class ConfigContext(BaseModel):
    defaults: JobConfiguration
    providers: Dict[str, Any] = Field(default_factory=dict)
    paths: PathsConfig = Field(default_factory=PathsConfig)
