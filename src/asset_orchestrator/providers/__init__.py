"""Generation backends driven by the orchestrator."""

from .providers_base import GenerationBackend, ImageResult, OperationHandle
from .providers_factory import create_backend
from .providers_gemini import GeminiBackend

__all__ = [
    "GenerationBackend",
    "ImageResult",
    "OperationHandle",
    "GeminiBackend",
    "create_backend",
]
