"""Factory for generation backends."""

from ..config import OrchestratorConfig
from ..credentials.credential_providers import CredentialProvider
from .providers_base import GenerationBackend
from .providers_gemini import GeminiBackend


def create_backend(
    name: str, *, config: OrchestratorConfig, credentials: CredentialProvider
) -> GenerationBackend:
    """Instantiate a generation backend by name."""
    lower = name.lower()
    if lower == "gemini":
        return GeminiBackend(
            credentials=credentials,
            api_url_base=config.api_url_base,
            image_model=config.image_model,
            video_model=config.video_model,
            timeout_seconds=config.request_timeout_seconds,
            download_timeout_seconds=config.download_timeout_seconds,
        )
    raise ValueError(f"Unsupported backend '{name}'")
