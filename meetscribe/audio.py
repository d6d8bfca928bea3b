"""
Audio decoding and segment re-encoding.

Input audio of any container ffmpeg understands is decoded into one float
array per channel (normalised to [-1, 1]). Segments are written back out as
self-contained 16-bit PCM WAV blobs that any consumer can play or submit
without bespoke decoding. 16-bit PCM WAV input is read in-process; everything
else goes through ffprobe/ffmpeg.
"""

import io
import json
import math
import os
import logging
import subprocess
import tempfile
import wave
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from .constants import PCM_SAMPLE_WIDTH, PCM_NEGATIVE_SCALE, PCM_POSITIVE_SCALE
from .core.errors import DecodeError
from .models import AudioSegment, DecodedAudio, SegmentWindow

logger = logging.getLogger("MeetScribe.Audio")

AudioSource = Union[bytes, bytearray, str, Path]

# Absorbs float error when converting second offsets back to frame indexes.
_FRAME_EPSILON = 1e-6


def decode(source: AudioSource) -> DecodedAudio:
    """
    Decode an audio file into per-channel sample buffers.

    Args:
        source: Raw file bytes or a path to the file.

    Returns:
        DecodedAudio with the original sample rate and channel count.

    Raises:
        DecodeError: If the input is missing, empty, corrupt or has no audio stream.
    """
    data = _read_source(source)
    if not data:
        raise DecodeError("Audio input is empty.")

    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        decoded = _decode_pcm_wav(data)
        if decoded is not None:
            return decoded
        logger.debug("WAV input is not 16-bit PCM, falling back to ffmpeg.")

    return _decode_with_ffmpeg(data)


def reencode(channels: Sequence[np.ndarray], sample_rate: int) -> bytes:
    """
    Encode per-channel float samples as a 16-bit PCM WAV blob.

    Samples are clamped to [-1, 1] before scaling so loud input saturates
    instead of wrapping around. Sample rate and channel count are kept as is.
    """
    if not channels:
        raise ValueError("At least one channel is required.")
    if sample_rate <= 0:
        raise ValueError(f"Invalid sample rate: {sample_rate}")

    lengths = {len(c) for c in channels}
    if len(lengths) != 1:
        raise ValueError(f"Channels have different lengths: {sorted(lengths)}")

    samples = np.vstack([np.asarray(c, dtype=np.float64) for c in channels])
    samples = np.clip(np.nan_to_num(samples, nan=0.0), -1.0, 1.0)
    scaled = np.where(samples < 0, samples * PCM_NEGATIVE_SCALE, samples * PCM_POSITIVE_SCALE)
    pcm = np.rint(scaled).astype("<i2")

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(len(channels))
        wf.setsampwidth(PCM_SAMPLE_WIDTH)
        wf.setframerate(sample_rate)
        # Interleave: frame-major order, one sample per channel per frame
        wf.writeframes(pcm.T.reshape(-1).tobytes())
    return buffer.getvalue()


def slice_segment(audio: DecodedAudio, window: SegmentWindow) -> AudioSegment:
    """Cut the samples covered by a window out of the decoded recording."""
    start = _to_frame(window.start_seconds, audio.sample_rate, audio.frame_count)
    end = _to_frame(window.end_seconds, audio.sample_rate, audio.frame_count)
    return AudioSegment(
        index=window.index,
        start_offset_seconds=window.start_seconds,
        duration_seconds=window.duration_seconds,
        channel_data=[channel[start:end] for channel in audio.channels],
        sample_rate=audio.sample_rate,
    )


def _to_frame(seconds: float, sample_rate: int, frame_count: int) -> int:
    return min(frame_count, int(math.floor(seconds * sample_rate + _FRAME_EPSILON)))


def _read_source(source: AudioSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise DecodeError(f"Cannot read audio file {path}: {e}") from e


def _decode_pcm_wav(data: bytes) -> Optional[DecodedAudio]:
    try:
        with wave.open(io.BytesIO(data), "rb") as wf:
            if wf.getsampwidth() != PCM_SAMPLE_WIDTH:
                return None
            channel_count = wf.getnchannels()
            sample_rate = wf.getframerate()
            frames = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError) as e:
        logger.debug(f"In-process WAV decode failed: {e}")
        return None

    pcm = np.frombuffer(frames, dtype="<i2")
    # Drop a trailing partial frame left by a truncated file
    pcm = pcm[:len(pcm) - len(pcm) % channel_count]
    pcm = pcm.reshape(-1, channel_count).T.astype(np.float64)
    floats = np.where(pcm < 0, pcm / PCM_NEGATIVE_SCALE, pcm / PCM_POSITIVE_SCALE)
    return DecodedAudio(
        channels=[floats[c].astype(np.float32) for c in range(channel_count)],
        sample_rate=sample_rate,
    )


def _decode_with_ffmpeg(data: bytes) -> DecodedAudio:
    # ffmpeg needs a seekable file for containers with trailing indexes (mp4/m4a)
    with tempfile.NamedTemporaryFile(suffix=".audio", delete=False) as tmp:
        tmp.write(data)
        tmp_path = tmp.name

    try:
        sample_rate, channel_count = _probe_stream(tmp_path)
        cmd = [
            'ffmpeg', '-v', 'error', '-i', tmp_path,
            '-vn',                          # No video
            '-map', '0:a:0',                # First audio stream only
            '-ac', str(channel_count),      # Keep channel layout
            '-ar', str(sample_rate),        # Keep sample rate
            '-f', 'f32le', '-acodec', 'pcm_f32le',
            'pipe:1'
        ]
        raw = _run(cmd).stdout
    finally:
        os.unlink(tmp_path)

    samples = np.frombuffer(raw, dtype="<f4")
    samples = samples[:len(samples) - len(samples) % channel_count]
    interleaved = samples.reshape(-1, channel_count)
    logger.debug(f"Decoded {interleaved.shape[0]} frames, {channel_count} channel(s) @ {sample_rate} Hz")
    return DecodedAudio(
        channels=[interleaved[:, c].copy() for c in range(channel_count)],
        sample_rate=sample_rate,
    )


def _probe_stream(path: str) -> tuple[int, int]:
    cmd = [
        'ffprobe', '-v', 'error', '-select_streams', 'a:0',
        '-show_entries', 'stream=sample_rate,channels',
        '-of', 'json', path
    ]
    output = _run(cmd).stdout
    try:
        streams = json.loads(output or b"{}").get("streams", [])
    except json.JSONDecodeError as e:
        raise DecodeError(f"Unreadable ffprobe output: {e}") from e
    if not streams:
        raise DecodeError("No audio stream found in input.")

    stream = streams[0]
    try:
        sample_rate = int(stream["sample_rate"])
        channel_count = int(stream["channels"])
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Audio stream has no usable sample rate/channel count: {stream}") from e
    if sample_rate <= 0 or channel_count <= 0:
        raise DecodeError(f"Audio stream has no usable sample rate/channel count: {stream}")
    return sample_rate, channel_count


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(cmd, check=True, capture_output=True)
    except FileNotFoundError as e:
        raise DecodeError(f"{cmd[0]} is not installed or not on PATH.") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        raise DecodeError(f"{cmd[0]} could not decode the input: {stderr or e}") from e
