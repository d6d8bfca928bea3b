"""MeetScribe - meeting transcription, minutes and translation on Gemini."""

__version__ = "0.3.0"
