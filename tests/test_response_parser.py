import json
import unittest

from meetscribe.core.errors import UnrepairableResponseError
from meetscribe.response_parser import ResponseParser

FIRST = '{"speaker": "Speaker 1", "timestamp": "00:01", "text": "Hello."}'
SECOND = '{"speaker": "Speaker 2", "timestamp": "00:04", "text": "Hi there."}'


class TestRepairJsonArray(unittest.TestCase):

    def test_dangling_comma(self):
        text = f"[{FIRST}, {SECOND},"
        result = ResponseParser.repair_json_array(text)
        self.assertEqual(result, [json.loads(FIRST), json.loads(SECOND)])

    def test_dangling_comma_with_whitespace(self):
        text = f"[\n  {FIRST},\n  {SECOND},\n  "
        self.assertEqual(len(ResponseParser.repair_json_array(text)), 2)

    def test_truncated_last_object_is_dropped(self):
        text = f'[{FIRST}, {SECOND}, {{"speaker": "Speaker 1", "timestamp": "00:0'
        result = ResponseParser.repair_json_array(text)
        self.assertEqual(result, [json.loads(FIRST), json.loads(SECOND)])

    def test_truncated_after_key(self):
        text = f'[{FIRST}, {{"speaker":'
        self.assertEqual(ResponseParser.repair_json_array(text), [json.loads(FIRST)])

    def test_only_object_truncated(self):
        with self.assertRaises(UnrepairableResponseError):
            ResponseParser.repair_json_array('[{"speaker": "Speaker 1", "timestamp": "00:01", "te')

    def test_only_object_truncated_after_inner_brace_in_text(self):
        # The "}" lives inside a string value and must not be taken as a close
        with self.assertRaises(UnrepairableResponseError):
            ResponseParser.repair_json_array('[{"speaker": "Speaker 1", "text": "use a } here and')

    def test_brace_inside_text_is_not_an_object_end(self):
        tricky = '{"speaker": "Speaker 1", "timestamp": "00:02", "text": "The map is {a: 1}, ok"}'
        text = f'[{FIRST}, {tricky}, {{"speaker": "Speaker 2", "text": "cut }} off'
        result = ResponseParser.repair_json_array(text)
        self.assertEqual(len(result), 2)
        self.assertEqual(result[1]["text"], "The map is {a: 1}, ok")

    def test_escaped_quote_inside_text(self):
        quoted = '{"speaker": "Speaker 1", "timestamp": "00:03", "text": "She said \\"no}\\" twice"}'
        text = f'[{quoted}, {{"speaker": "Spea'
        result = ResponseParser.repair_json_array(text)
        self.assertEqual(result[0]["text"], 'She said "no}" twice')

    def test_not_an_array(self):
        with self.assertRaises(UnrepairableResponseError):
            ResponseParser.repair_json_array('{"speaker": "Speaker 1"}')

    def test_no_closing_brace(self):
        with self.assertRaises(UnrepairableResponseError):
            ResponseParser.repair_json_array('[{"speaker": "Spe')

    def test_fenced_payload(self):
        text = f"```json\n[{FIRST}, {SECOND}, {{\"spe"
        self.assertEqual(len(ResponseParser.repair_json_array(text)), 2)


class TestParseJson(unittest.TestCase):

    def test_strips_code_fence(self):
        self.assertEqual(ResponseParser.parse_json(f"```json\n[{FIRST}]\n```"), [json.loads(FIRST)])

    def test_plain_payload(self):
        self.assertEqual(ResponseParser.parse_json(f"  [{FIRST}]  "), [json.loads(FIRST)])

    def test_invalid_payload_raises_decode_error(self):
        with self.assertRaises(json.JSONDecodeError):
            ResponseParser.parse_json(f"[{FIRST},")


if __name__ == '__main__':
    unittest.main()
