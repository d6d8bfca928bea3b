from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union


@dataclass
class MediaPart:
    """Inline binary payload (e.g. one WAV segment) sent alongside a prompt."""
    data: bytes
    mime_type: str


@dataclass
class GenerationResult:
    """Provider-neutral view of a single model response."""
    text: Optional[str]
    finish_reason: Optional[str] = None
    finish_message: Optional[str] = None
    block_reason: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0


Content = Union[str, MediaPart]


class ModelClient(ABC):
    """Abstract connection to a generative model with structured output."""

    @abstractmethod
    def generate(self, contents: List[Content], schema: Dict[str, Any]) -> GenerationResult:
        """
        Issue one schema-constrained generation request.

        Args:
            contents: Prompt text and inline media parts, in order.
            schema: Response schema the output must follow (JSON).

        Returns:
            GenerationResult; `text` is None when the model produced no output.

        Raises:
            TransportError: If the request did not complete.
        """
        pass


class ProgressReporter(ABC):
    """Sink for human-readable progress messages."""

    @abstractmethod
    def report(self, message: str) -> None:
        pass
