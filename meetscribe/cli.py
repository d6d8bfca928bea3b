import argparse
import json
import sys
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import MEETING_FILENAME, SUPPORTED_AUDIO_EXTENSIONS, TRANSCRIPT_FILENAME
from .core.config import load_config
from .core.console import ConsoleProgressReporter, console
from .core.errors import MeetScribeError
from .core.factory import ProviderFactory
from .core.logger import APILogger
from .core.models import ConfigContext, Meeting, StageConfig
from .core.providers import ModelClient
from .pipeline import MeetingProcessor, SegmentTranscriber, SummaryRequester, TranscriptionOrchestrator

# Logger will be initialized after config is loaded
logger = logging.getLogger("MeetScribe.CLI")


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MeetScribe - meeting transcription, minutes and translation.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    parser.add_argument("-c", "--config", help="Path to config.yaml")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    transcribe_parser = subparsers.add_parser("transcribe", help="Transcribe an audio file to transcript JSON")
    transcribe_parser.add_argument("file", help="Input audio file")
    transcribe_parser.add_argument("-o", "--output", help="Output JSON file")
    transcribe_parser.add_argument("--segment-seconds", type=_positive_float, help="Chunk length in seconds")

    process_parser = subparsers.add_parser("process", help="Transcribe and summarize an audio file to meeting JSON")
    process_parser.add_argument("file", help="Input audio file")
    process_parser.add_argument("-o", "--output", help="Output JSON file")
    process_parser.add_argument("--title", help="Meeting title (default: file name)")
    process_parser.add_argument("--segment-seconds", type=_positive_float, help="Chunk length in seconds")

    translate_parser = subparsers.add_parser("translate", help="Translate the summary of a meeting JSON")
    translate_parser.add_argument("meeting", help="Meeting JSON produced by 'process'")
    translate_parser.add_argument("-l", "--language", required=True, help="Target language, e.g. 'Spanish'")
    translate_parser.add_argument("-o", "--output", help="Output JSON file (default: update the input file)")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    global logger

    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return

    try:
        config_context = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.error_panel(str(e), title="Configuration Error")
        sys.exit(1)
    config = config_context.defaults

    debug_mode = args.verbose or config.debug
    console.configure(output_mode=config.output_mode, debug=debug_mode)
    from .utils import setup_logging
    logger = setup_logging(log_dir=config_context.paths.logs, debug=debug_mode, output_mode=config.output_mode)

    if getattr(args, "segment_seconds", None):
        config.segment_seconds = args.segment_seconds

    try:
        if args.command == "transcribe":
            _run_transcribe(args, config_context)
        elif args.command == "process":
            _run_process(args, config_context)
        elif args.command == "translate":
            _run_translate(args, config_context)
    except MeetScribeError as e:
        logger.debug("Command failed", exc_info=True)
        console.error_panel(str(e), title=type(e).__name__)
        sys.exit(1)
    except ValueError as e:
        console.error_panel(str(e), title="Error")
        sys.exit(1)


def _run_transcribe(args, config_context: ConfigContext) -> None:
    file_path = _check_audio_file(args.file)
    output = Path(args.output) if args.output else _default_output(config_context, file_path, TRANSCRIPT_FILENAME)
    api_logger = _api_logger(config_context, output.parent)

    orchestrator = _build_orchestrator(config_context, api_logger)
    transcript = orchestrator.transcribe_audio(file_path)

    if transcript.is_partial:
        console.warning("Some chunks were truncated by the model and repaired. The transcript may be missing speech.")
    _write_json(output, transcript.to_wire())
    console.success(f"Transcript saved to {output} ({len(transcript)} lines)")


def _run_process(args, config_context: ConfigContext) -> None:
    file_path = _check_audio_file(args.file)
    output = Path(args.output) if args.output else _default_output(config_context, file_path, MEETING_FILENAME)
    api_logger = _api_logger(config_context, output.parent)

    processor = MeetingProcessor(
        _build_orchestrator(config_context, api_logger),
        SummaryRequester(_build_client(config_context, config_context.defaults.summarize, api_logger)),
    )
    meeting = processor.process(file_path, title=args.title)

    if meeting.incomplete_segments:
        console.warning("Some chunks were truncated by the model and repaired. The transcript may be missing speech.")
    _write_json(output, meeting.to_wire())
    console.success(f"Meeting saved to {output}")


def _run_translate(args, config_context: ConfigContext) -> None:
    source = Path(args.meeting)
    if not source.exists():
        raise ValueError(f"File not found: {source}")
    meeting = Meeting.model_validate_json(source.read_text())
    output = Path(args.output) if args.output else source
    api_logger = _api_logger(config_context, output.parent)

    summarizer = SummaryRequester(_build_client(config_context, config_context.defaults.summarize, api_logger))
    # Only the summary is translated; transcription is not involved
    processor = MeetingProcessor(orchestrator=None, summarizer=summarizer)

    with console.status(f"Translating summary to {args.language}..."):
        translated = processor.translate(meeting, args.language)

    _write_json(output, translated.to_wire())
    console.success(f"Translated meeting saved to {output}")


def _check_audio_file(file_arg: str) -> Path:
    file_path = Path(file_arg)
    if not file_path.exists():
        raise ValueError(f"File not found: {file_path}")
    if file_path.suffix.lower() not in SUPPORTED_AUDIO_EXTENSIONS:
        raise ValueError(f"Unsupported file format: {file_path.suffix}. "
                         f"Supported: {', '.join(sorted(SUPPORTED_AUDIO_EXTENSIONS))}")
    return file_path


def _default_output(config_context: ConfigContext, file_path: Path, filename: str) -> Path:
    return Path(config_context.paths.output) / file_path.stem / filename


def _api_logger(config_context: ConfigContext, directory: Path) -> Optional[APILogger]:
    if not config_context.defaults.log_api_calls:
        return None
    return APILogger(directory)


def _build_client(config_context: ConfigContext, stage: StageConfig, api_logger: Optional[APILogger]) -> ModelClient:
    return ProviderFactory.create(
        stage.provider, config_context.providers.get(stage.provider), stage.model, api_logger=api_logger
    )


def _build_orchestrator(config_context: ConfigContext, api_logger: Optional[APILogger]) -> TranscriptionOrchestrator:
    config = config_context.defaults
    client = _build_client(config_context, config.transcribe, api_logger)
    return TranscriptionOrchestrator(
        SegmentTranscriber(client),
        progress=ConsoleProgressReporter(),
        segment_seconds=config.segment_seconds,
    )


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


if __name__ == "__main__":
    main()
