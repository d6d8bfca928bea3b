"""Response parsing utilities for MeetScribe."""

import json
import logging
from typing import Any, List

from .core.errors import UnrepairableResponseError

logger = logging.getLogger("MeetScribe")

_FENCE = "```"


class ResponseParser:
    """Handles parsing of AI responses into structured data."""

    @staticmethod
    def clean_json(json_str: str) -> str:
        """
        Remove a markdown code fence wrapped around a JSON payload.

        Args:
            json_str: JSON string potentially wrapped in ```json ... ```

        Returns:
            Cleaned JSON string
        """
        content = json_str.strip()
        if content.startswith(_FENCE):
            content = content[len(_FENCE):]
            if content.lower().startswith("json"):
                content = content[4:]
            if content.rstrip().endswith(_FENCE):
                content = content.rstrip()[:-len(_FENCE)]
        return content.strip()

    @staticmethod
    def parse_json(json_str: str) -> Any:
        """
        Parse a JSON payload returned by the model.

        Raises:
            json.JSONDecodeError: If JSON parsing fails
        """
        return json.loads(ResponseParser.clean_json(json_str))

    @staticmethod
    def repair_json_array(json_str: str) -> List[Any]:
        """
        Salvage a truncated JSON array by keeping every complete element.

        The scan runs in two phases. First, a token-aware pass (string and
        escape state is tracked, so braces or quotes inside string values are
        ignored) finds where the last complete top-level element ends. Second,
        everything after that point is dropped, be it a dangling comma or a
        half-written object, and the array is closed.

        Args:
            json_str: Malformed JSON text that should be an array of objects

        Returns:
            The parsed list of complete elements

        Raises:
            UnrepairableResponseError: If the text is not an array or no element is complete
        """
        logger.warning("Attempting to repair truncated JSON...")
        content = ResponseParser.clean_json(json_str)

        if not content.startswith("["):
            raise UnrepairableResponseError("JSON does not start with an array bracket.")

        end = ResponseParser._last_complete_element_end(content)
        if end == -1:
            if "}" not in content:
                raise UnrepairableResponseError("No closing brace found in JSON text to repair from.")
            raise UnrepairableResponseError("Cannot repair: the only object in the array is truncated.")

        repaired = content[:end] + "]"
        try:
            result = json.loads(repaired)
        except json.JSONDecodeError as e:
            raise UnrepairableResponseError(f"Could not repair the malformed JSON response: {e}") from e

        logger.info(f"Repaired JSON: kept {len(result)} complete element(s), dropped {len(content) - end} trailing char(s).")
        return result

    @staticmethod
    def _last_complete_element_end(content: str) -> int:
        """Index just past the last complete element of the outer array, or -1."""
        depth = 0
        in_string = False
        escaped = False
        last_end = -1

        for i, ch in enumerate(content):
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                    if depth == 1:
                        last_end = i + 1
                continue

            if ch == '"':
                in_string = True
            elif ch in "{[":
                depth += 1
            elif ch in "}]":
                depth -= 1
                if depth == 1:
                    last_end = i + 1
                elif depth <= 0:
                    # Outer array closed; anything after it is not ours
                    break

        return last_end
