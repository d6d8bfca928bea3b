"""Test doubles shared by the test modules."""

import io
import json
import wave
from typing import Any, List

import numpy as np

from meetscribe.audio import reencode
from meetscribe.core.providers import GenerationResult, ModelClient, ProgressReporter


class FakeModelClient(ModelClient):
    """Replays canned responses and records every request."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.requests = []

    def generate(self, contents, schema):
        self.requests.append((contents, schema))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, GenerationResult):
            return response
        text = response if isinstance(response, str) else json.dumps(response)
        return GenerationResult(text=text, finish_reason="STOP")


class RecordingProgress(ProgressReporter):
    def __init__(self):
        self.messages = []

    def report(self, message: str) -> None:
        self.messages.append(message)


def make_wav(duration_seconds: float, sample_rate: int = 100, channels: int = 1) -> bytes:
    frames = int(round(duration_seconds * sample_rate))
    t = np.arange(frames) / sample_rate
    data = [0.5 * np.sin(2 * np.pi * 3 * t + c) for c in range(channels)]
    return reencode(data, sample_rate)


def wav_frame_count(blob: bytes) -> int:
    with wave.open(io.BytesIO(blob), "rb") as wf:
        return wf.getnframes()


def line(speaker: str, timestamp: str, text: str) -> dict:
    return {"speaker": speaker, "timestamp": timestamp, "text": text}
