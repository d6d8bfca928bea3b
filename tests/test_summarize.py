import unittest

from meetscribe.core.errors import (
    EmptyResponseError, InvalidSummaryShapeError, MalformedResponseError, SafetyBlockedError
)
from meetscribe.core.models import MagicSummary, TranscriptLine
from meetscribe.core.providers import GenerationResult
from meetscribe.pipeline.summarize import SummaryRequester, flatten_summary
from meetscribe.prompts import SUMMARY_SCHEMA
from tests.fakes import FakeModelClient

SUMMARY = {
    "executiveSummary": "The team agreed to ship the beta next week.",
    "actionItems": [{"item": "Prepare release notes", "assignee": "Dana"}],
    "keyDecisions": [{"decision": "Ship beta on Monday", "rationale": "QA signed off"}],
}

TRANSLATED = {
    "executiveSummary": "El equipo acordó lanzar la beta la próxima semana.",
    "actionItems": [{"item": "Preparar las notas de la versión", "assignee": "Dana"}],
    "keyDecisions": [{"decision": "Lanzar la beta el lunes", "rationale": "QA dio el visto bueno"}],
}


def transcript():
    return [
        TranscriptLine(speaker="Speaker 1", timestamp="00:01", text="Are we ready to ship?"),
        TranscriptLine(speaker="Speaker 2", timestamp="00:04", text="QA signed off yesterday."),
    ]


class TestSummarize(unittest.TestCase):

    def test_summary_is_parsed(self):
        client = FakeModelClient([SUMMARY])
        summary = SummaryRequester(client).summarize(transcript())

        self.assertEqual(summary.executive_summary, SUMMARY["executiveSummary"])
        self.assertEqual(summary.action_items[0].assignee, "Dana")
        self.assertEqual(summary.key_decisions[0].rationale, "QA signed off")
        self.assertEqual(summary.to_wire(), SUMMARY)

    def test_prompt_contains_flattened_transcript(self):
        client = FakeModelClient([SUMMARY])
        SummaryRequester(client).summarize(transcript())

        contents, schema = client.requests[0]
        self.assertIs(schema, SUMMARY_SCHEMA)
        self.assertIn("Speaker 1: Are we ready to ship?\nSpeaker 2: QA signed off yesterday.", contents[0])
        # Timestamps are not part of the summary prompt
        self.assertNotIn("00:04", contents[0])

    def test_rationale_is_optional(self):
        payload = dict(SUMMARY, keyDecisions=[{"decision": "Ship beta on Monday"}])
        summary = SummaryRequester(FakeModelClient([payload])).summarize(transcript())
        self.assertIsNone(summary.key_decisions[0].rationale)

    def test_missing_field_is_rejected(self):
        payload = {k: v for k, v in SUMMARY.items() if k != "keyDecisions"}
        with self.assertRaises(InvalidSummaryShapeError) as ctx:
            SummaryRequester(FakeModelClient([payload])).summarize(transcript())
        self.assertEqual(ctx.exception.missing, ["keyDecisions"])

    def test_wrong_field_type_is_rejected(self):
        payload = dict(SUMMARY, actionItems="none")
        with self.assertRaises(InvalidSummaryShapeError):
            SummaryRequester(FakeModelClient([payload])).summarize(transcript())

    def test_array_payload_is_rejected(self):
        with self.assertRaises(InvalidSummaryShapeError):
            SummaryRequester(FakeModelClient([[SUMMARY]])).summarize(transcript())

    def test_non_json_is_malformed(self):
        with self.assertRaises(MalformedResponseError):
            SummaryRequester(FakeModelClient(["Here is your summary: great meeting!"])).summarize(transcript())

    def test_empty_response(self):
        client = FakeModelClient([GenerationResult(text=None, finish_reason="STOP")])
        with self.assertRaises(EmptyResponseError):
            SummaryRequester(client).summarize(transcript())

    def test_safety_block(self):
        client = FakeModelClient([GenerationResult(text=None, finish_reason="SAFETY")])
        with self.assertRaises(SafetyBlockedError):
            SummaryRequester(client).summarize(transcript())


class TestTranslate(unittest.TestCase):

    def test_translation(self):
        original = MagicSummary.model_validate(SUMMARY)
        client = FakeModelClient([TRANSLATED])

        translated = SummaryRequester(client).translate(original, "Spanish")

        self.assertEqual(translated.to_wire(), TRANSLATED)
        self.assertEqual(original.to_wire(), SUMMARY)

        prompt = client.requests[0][0][0]
        self.assertIn("to Spanish", prompt)
        self.assertIn(flatten_summary(original), prompt)

    def test_translation_is_validated(self):
        original = MagicSummary.model_validate(SUMMARY)
        payload = {"executiveSummary": "Resumen"}
        with self.assertRaises(InvalidSummaryShapeError) as ctx:
            SummaryRequester(FakeModelClient([payload])).translate(original, "Spanish")
        self.assertEqual(ctx.exception.missing, ["actionItems", "keyDecisions"])


class TestFlattenSummary(unittest.TestCase):

    def test_layout(self):
        summary = MagicSummary.model_validate({
            "executiveSummary": "Short meeting.",
            "actionItems": [{"item": "Book room", "assignee": "Unassigned"},
                            {"item": "Send invite", "assignee": "Lee"}],
            "keyDecisions": [{"decision": "Meet weekly"}, {"decision": "Use Zoom", "rationale": "Free"}],
        })
        self.assertEqual(flatten_summary(summary), (
            "Executive Summary: Short meeting.\n"
            "Key Decisions: Meet weekly (Rationale: N/A); Use Zoom (Rationale: Free)\n"
            "Action Items: Book room (Assignee: Unassigned); Send invite (Assignee: Lee)"
        ))


if __name__ == '__main__':
    unittest.main()
