"""Model backends.

- EchoBackend: deterministic stand-in (default for tests and offline runs)
- OllamaBackend: local Ollama server
- GoogleAIBackend: Gemini via the Google AI REST API
- OpenAIBackend: OpenAI-compatible chat completions
"""

from .base import Backend, common_options, fold_documents
from .echo import EchoBackend
from .googleai import GoogleAIBackend
from .ollama import OllamaBackend
from .openai_compat import OpenAIBackend

__all__ = [
    "Backend",
    "EchoBackend",
    "GoogleAIBackend",
    "OllamaBackend",
    "OpenAIBackend",
    "common_options",
    "fold_documents",
]
