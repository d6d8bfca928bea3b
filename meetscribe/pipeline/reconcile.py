"""Rewrites segment-relative timestamps into recording-absolute ones."""

import math
import re
from typing import Iterable, List, Optional

from ..core.models import TranscriptLine

_FIELD = re.compile(r"[0-9]+(\.[0-9]+)?")


def parse_timestamp(timestamp: str) -> Optional[float]:
    """Seconds for an `MM:SS` string, or None if it is not one."""
    parts = timestamp.split(":")
    if len(parts) != 2 or not all(_FIELD.fullmatch(p) for p in parts):
        return None
    return float(parts[0]) * 60 + float(parts[1])


def format_timestamp(total_seconds: int) -> str:
    """Zero-padded `MM:SS`; minutes are not wrapped into hours."""
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def reconcile(segment_start_seconds: float, lines: Iterable[TranscriptLine]) -> List[TranscriptLine]:
    """
    Shift each line's timestamp by the segment's start offset.

    Lines whose timestamp cannot be parsed are passed through unchanged.
    """
    adjusted = []
    for line in lines:
        relative = parse_timestamp(line.timestamp)
        if relative is None:
            adjusted.append(line)
            continue
        absolute = math.floor(segment_start_seconds + relative)
        adjusted.append(line.model_copy(update={"timestamp": format_timestamp(absolute)}))
    return adjusted
