"""Prompts and response schemas sent to the model."""

from typing import Iterable

TRANSCRIPTION_PROMPT = """Transcribe the audio. Identify distinct speakers as "Speaker 1", "Speaker 2", etc. \
Provide timestamps for each segment in MM:SS format, relative to the start of this audio. \
Important: Break up long monologues into smaller segments of no more than 3-4 sentences each. \
The final output MUST be a complete and valid JSON array."""

SUMMARY_PROMPT = """Based on the following meeting transcript, please generate a structured summary. The summary must be detailed and professional.

For 'keyDecisions', it is crucial to not only state the decision but to also capture the *rationale* or justification behind it if it is mentioned in the discussion. This detail is very important.

Transcript:
---
{transcript}
---
"""

TRANSLATION_PROMPT = """Translate the following meeting summary text to {language}. Keep the original meaning and professional tone. Respond ONLY with a JSON object that follows the provided schema. Do not add any extra commentary or markdown formatting.

Text to translate:
---
{summary}
---
"""

# Response schemas use the OpenAPI subset accepted by the Gemini API.

TRANSCRIPT_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "speaker": {
                "type": "STRING",
                "description": "The identified speaker. E.g., 'Speaker 1'."
            },
            "timestamp": {
                "type": "STRING",
                "description": "The timestamp of the speech in MM:SS format."
            },
            "text": {
                "type": "STRING",
                "description": "The transcribed text for this segment."
            }
        },
        "required": ["speaker", "timestamp", "text"]
    }
}

SUMMARY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "executiveSummary": {
            "type": "STRING",
            "description": "A concise, professional summary of the entire meeting conversation, written in an executive-ready format."
        },
        "actionItems": {
            "type": "ARRAY",
            "description": "A list of all explicit action items mentioned. Each item should be clear and actionable.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "item": {
                        "type": "STRING",
                        "description": "The specific task or action to be completed."
                    },
                    "assignee": {
                        "type": "STRING",
                        "description": "The person or team assigned to the action item. If not explicitly mentioned, state 'Unassigned'."
                    }
                },
                "required": ["item", "assignee"]
            }
        },
        "keyDecisions": {
            "type": "ARRAY",
            "description": "A detailed list of all key decisions made. For each decision, provide context and the rationale behind it if available in the transcript.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "decision": {
                        "type": "STRING",
                        "description": "The specific decision that was made."
                    },
                    "rationale": {
                        "type": "STRING",
                        "description": "The reasoning or justification for the decision, as mentioned in the conversation."
                    }
                },
                "required": ["decision"]
            }
        }
    },
    "required": ["executiveSummary", "actionItems", "keyDecisions"]
}

SUMMARY_REQUIRED_FIELDS = tuple(SUMMARY_SCHEMA["required"])


def build_summary_prompt(transcript_lines: Iterable[str]) -> str:
    return SUMMARY_PROMPT.format(transcript="\n".join(transcript_lines))


def build_translation_prompt(summary_text: str, language: str) -> str:
    return TRANSLATION_PROMPT.format(language=language, summary=summary_text)
