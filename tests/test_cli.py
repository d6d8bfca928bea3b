import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from meetscribe.cli import _check_audio_file, main
from meetscribe.core.console import console
from tests.fakes import FakeModelClient, line, make_wav

SUMMARY = {
    "executiveSummary": "Quick status update.",
    "actionItems": [{"item": "Send notes", "assignee": "Speaker 1"}],
    "keyDecisions": [{"decision": "Keep the schedule"}],
}


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.root = Path(self.tmp.name)

        self.config_path = self.root / "config.yaml"
        self.config_path.write_text(yaml.safe_dump({
            "paths": {"output": str(self.root / "out"), "logs": str(self.root / "logs")},
            "processing": {"output_mode": "silent"},
            "providers": {"gemini": {"api_key": "test-key"}},
        }))

        self.audio_path = self.root / "standup.wav"
        self.audio_path.write_bytes(make_wav(70, sample_rate=100))

    def tearDown(self):
        root_logger = logging.getLogger("MeetScribe")
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.propagate = True
        console.configure(output_mode="standard")

    def run_cli(self, *args):
        main(["-c", str(self.config_path), *args])

    def test_transcribe(self):
        client = FakeModelClient([
            [line("Speaker 1", "00:03", "Morning.")],
            [line("Speaker 2", "00:04", "Hi.")],
        ])
        with patch("meetscribe.cli.ProviderFactory.create", return_value=client):
            self.run_cli("transcribe", str(self.audio_path))

        output = self.root / "out" / "standup" / "transcript.json"
        data = json.loads(output.read_text())
        self.assertEqual([l["timestamp"] for l in data["lines"]], ["00:03", "01:03"])
        self.assertEqual(data["incompleteSegments"], [])
        self.assertAlmostEqual(data["durationSeconds"], 70)

    def test_transcribe_segment_override(self):
        client = FakeModelClient([[], [], []])
        output = self.root / "custom.json"
        with patch("meetscribe.cli.ProviderFactory.create", return_value=client):
            self.run_cli("transcribe", str(self.audio_path), "--segment-seconds", "30", "-o", str(output))

        self.assertEqual(len(client.requests), 3)
        self.assertTrue(output.exists())

    def test_process_and_translate(self):
        client = FakeModelClient([
            [line("Speaker 1", "00:03", "Morning.")],
            [line("Speaker 2", "00:04", "Hi.")],
            SUMMARY,
        ])
        with patch("meetscribe.cli.ProviderFactory.create", return_value=client):
            self.run_cli("process", str(self.audio_path), "--title", "Standup")

        output = self.root / "out" / "standup" / "meeting.json"
        meeting = json.loads(output.read_text())
        self.assertEqual(meeting["title"], "Standup")
        self.assertEqual(meeting["status"], "Transcribed")
        self.assertEqual(meeting["duration"], "01:10")
        self.assertEqual(meeting["summary"], SUMMARY)

        translated_summary = dict(SUMMARY, executiveSummary="Kurzes Status-Update.")
        client = FakeModelClient([translated_summary])
        with patch("meetscribe.cli.ProviderFactory.create", return_value=client):
            self.run_cli("translate", str(output), "--language", "German")

        meeting = json.loads(output.read_text())
        self.assertEqual(meeting["status"], "Translated")
        self.assertEqual(meeting["translatedSummary"]["language"], "German")
        self.assertEqual(meeting["translatedSummary"]["summary"]["executiveSummary"], "Kurzes Status-Update.")
        self.assertEqual(meeting["summary"], SUMMARY)

    def test_missing_file_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("transcribe", str(self.root / "missing.wav"))
        self.assertEqual(ctx.exception.code, 1)

    def test_unsupported_extension_exits(self):
        notes = self.root / "notes.txt"
        notes.write_text("hello")
        with self.assertRaises(SystemExit):
            self.run_cli("transcribe", str(notes))

    def test_accepts_other_ffmpeg_containers(self):
        for suffix in (".opus", ".aiff", ".wma", ".MP3"):
            path = self.root / f"call{suffix}"
            path.write_bytes(b"\x00")
            self.assertEqual(_check_audio_file(str(path)), path)

    def test_model_failure_exits(self):
        client = FakeModelClient([
            [line("Speaker 1", "00:03", "Morning.")],
            '{"not": "an array"}',
        ])
        with patch("meetscribe.cli.ProviderFactory.create", return_value=client):
            with self.assertRaises(SystemExit) as ctx:
                self.run_cli("process", str(self.audio_path))
        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse((self.root / "out" / "standup" / "meeting.json").exists())

    def test_missing_config_exits(self):
        with self.assertRaises(SystemExit):
            main(["-c", str(self.root / "absent.yaml"), "transcribe", str(self.audio_path)])


if __name__ == '__main__':
    unittest.main()
