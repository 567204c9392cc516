"""Gemini / Veo generation backend over the Generative Language REST API."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from ..credentials.credential_providers import CredentialProvider
from ..domain.models import ArtifactRef
from ..exceptions import BackendError
from .providers_base import GenerationBackend, ImageResult, OperationHandle

logger = logging.getLogger(__name__)

# AssetRequest.config keys -> REST field names.
_IMAGE_CONFIG_FIELDS = {
    "aspect_ratio": "aspectRatio",
    "image_size": "imageSize",
}
_VIDEO_PARAMETER_FIELDS = {
    "aspect_ratio": "aspectRatio",
    "resolution": "resolution",
    "number_of_videos": "sampleCount",
    "negative_prompt": "negativePrompt",
    "duration_seconds": "durationSeconds",
    "person_generation": "personGeneration",
}


@dataclass(slots=True)
class GeminiBackend(GenerationBackend):
    """Call ``generateContent`` for images and ``predictLongRunning`` for video."""

    credentials: CredentialProvider
    api_url_base: str = "https://generativelanguage.googleapis.com/v1beta"
    image_model: str = "gemini-3.1-flash-image-preview"
    video_model: str = "veo-3.1-fast-generate-preview"
    timeout_seconds: float = 30.0
    download_timeout_seconds: float = 120.0
    log: logging.Logger = field(default_factory=lambda: logger)

    backend_id = "gemini"

    async def generate_image(
        self, prompt: str, config: Mapping[str, Any]
    ) -> ImageResult:
        model = config.get("model") or self.image_model
        url = f"{self.api_url_base}/models/{model}:generateContent"
        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseModalities": ["IMAGE"]},
        }
        image_config = _map_fields(config, _IMAGE_CONFIG_FIELDS)
        if image_config:
            body["generationConfig"]["imageConfig"] = image_config

        self.log.info(
            "gemini.image.request.start",
            extra={"model": model, "prompt_len": len(prompt)},
        )
        response = await self._post(url, json=body, timeout=self.timeout_seconds)
        data = _json_or_error(response)
        self.log.info("gemini.image.response.received %s", _response_summary(data))
        return _parse_image_response(data)

    async def submit_video_job(
        self, prompt: str, config: Mapping[str, Any]
    ) -> OperationHandle:
        model = config.get("model") or self.video_model
        url = f"{self.api_url_base}/models/{model}:predictLongRunning"
        body: dict[str, Any] = {"instances": [{"prompt": prompt}]}
        parameters = _map_fields(config, _VIDEO_PARAMETER_FIELDS)
        if parameters:
            body["parameters"] = parameters

        self.log.info(
            "gemini.video.submit.start",
            extra={"model": model, "prompt_len": len(prompt)},
        )
        response = await self._post(url, json=body, timeout=self.timeout_seconds)
        handle = _parse_operation(_json_or_error(response))
        self.log.info("gemini.video.submit.accepted", extra={"operation": handle.name})
        return handle

    async def poll_video_job(self, handle: OperationHandle) -> OperationHandle:
        url = f"{self.api_url_base}/{handle.name.lstrip('/')}"
        response = await self._get(url, timeout=self.timeout_seconds)
        refreshed = _parse_operation(_json_or_error(response))
        self.log.debug(
            "gemini.video.poll",
            extra={"operation": refreshed.name, "done": refreshed.done},
        )
        return refreshed

    async def fetch_artifact(self, uri: str) -> ArtifactRef:
        response = await self._get(
            uri, timeout=self.download_timeout_seconds, follow_redirects=True
        )
        if response.status_code != 200:
            raise BackendError(
                f"Artifact download failed with status {response.status_code}",
                status_code=response.status_code,
            )
        content_type = response.headers.get("Content-Type", "video/mp4")
        content_type = content_type.split(";", 1)[0].strip() or "video/mp4"
        self.log.info(
            "gemini.artifact.downloaded",
            extra={"size_bytes": len(response.content), "content_type": content_type},
        )
        return ArtifactRef(payload=response.content, content_type=content_type, source_uri=uri)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        api_key = self.credentials.current_key()
        # Without a key the request still goes out and the API's own
        # rejection is classified by the job runner.
        if api_key:
            headers["x-goog-api-key"] = api_key
        return headers

    async def _post(
        self, url: str, *, json: dict[str, Any], timeout: float
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(url, headers=self._headers(), json=json)

    async def _get(
        self, url: str, *, timeout: float, follow_redirects: bool = False
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=timeout, follow_redirects=follow_redirects
        ) as client:
            return await client.get(url, headers=self._headers())


def _map_fields(config: Mapping[str, Any], names: Mapping[str, str]) -> dict[str, Any]:
    return {
        rest_name: config[key]
        for key, rest_name in names.items()
        if config.get(key) is not None
    }


def _json_or_error(response: httpx.Response) -> dict[str, Any]:
    if response.status_code != 200:
        status, detail = _extract_error(response)
        raise BackendError(
            f"Gemini request failed (status={response.status_code}): {detail}",
            status_code=response.status_code,
            status=status,
        )
    try:
        data = response.json()
    except ValueError as exc:
        raise BackendError("Gemini response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise BackendError("Gemini response has unexpected shape")
    return data


def _extract_error(response: httpx.Response) -> tuple[str | None, str]:
    try:
        data = response.json()
    except ValueError:
        return None, response.text
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        message = (error.get("message") or "").strip()
        status = (error.get("status") or "").strip()
        return status or None, " ".join(part for part in (status, message) if part)
    return None, str(data)


def _parse_image_response(data: dict[str, Any]) -> ImageResult:
    finish_reason = None
    texts: list[str] = []
    for candidate in data.get("candidates") or []:
        if finish_reason is None:
            finish_reason = candidate.get("finishReason") or candidate.get("finish_reason")
        content = candidate.get("content") or {}
        for part in content.get("parts", []):
            inline = part.get("inline_data") or part.get("inlineData")
            if inline and inline.get("data"):
                mime = inline.get("mime_type") or inline.get("mimeType") or "image/png"
                try:
                    payload = base64.b64decode(inline["data"], validate=True)
                except ValueError as exc:
                    raise BackendError("Gemini response payload is invalid") from exc
                return ImageResult(
                    payload=payload, content_type=mime, finish_reason=finish_reason
                )
            if part.get("text"):
                texts.append(part["text"])
    return ImageResult(
        payload=None,
        finish_reason=finish_reason,
        text="; ".join(texts) or None,
    )


def _parse_operation(data: dict[str, Any]) -> OperationHandle:
    name = data.get("name")
    if not name:
        raise BackendError("Gemini did not return an operation name")
    error = data.get("error") if isinstance(data.get("error"), dict) else None
    done = bool(data.get("done"))
    return OperationHandle(
        name=str(name),
        done=done,
        artifact_uri=_video_uri(data.get("response") or {}) if done else None,
        error=error,
        metadata=dict(data.get("metadata") or {}),
    )


def _video_uri(response: Mapping[str, Any]) -> str | None:
    """Find the first video URI in either REST or SDK-shaped responses."""
    generate = response.get("generateVideoResponse") or {}
    samples = generate.get("generatedSamples") or response.get("generatedVideos") or []
    for sample in samples:
        video = (sample or {}).get("video") or {}
        uri = video.get("uri")
        if uri:
            return str(uri)
    return None


def _response_summary(data: dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    first = candidates[0] if candidates else {}
    parts = (first.get("content") or {}).get("parts", [])
    part_types = [
        "inline_data" if ("inline_data" in part or "inlineData" in part) else "text"
        for part in parts
    ]
    finish = first.get("finishReason") or first.get("finish_reason")
    return json.dumps(
        {"candidates": len(candidates), "part_types": part_types, "finish_reason": finish}
    )


__all__ = ["GeminiBackend"]
