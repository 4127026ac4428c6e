"""Generative text provider clients used by the domain orchestrators."""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import anthropic
import httpx
import yaml
from anthropic import Anthropic

from app.config import Settings, get_settings


logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:(image/[a-zA-Z0-9.+-]+);base64,")

FALLBACK_SYSTEM_PROMPTS = {
    "physique": (
        "You are an expert fitness coach analysing physique photos. "
        "Respond only with valid JSON matching the requested schema."
    ),
    "workout": (
        "You are an expert personal trainer creating workout programs. "
        "Respond only with valid JSON matching the requested schema."
    ),
    "nutrition": (
        "You are an expert sports nutritionist creating meal plans. "
        "Respond only with valid JSON matching the requested schema."
    ),
    "form": (
        "You are an expert strength coach assessing exercise technique. "
        "Respond only with valid JSON matching the requested schema."
    ),
}


class TransportError(Exception):
    """The provider call itself failed (network, HTTP status or empty reply)."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code


class AIClient(Protocol):
    def generate_text(self, messages: list[dict[str, Any]]) -> str:
        ...


def _split_data_uri(image: str) -> tuple[str, str]:
    """Return ``(media_type, base64 payload)`` for a raw or data-URI image."""

    match = _DATA_URI.match(image)
    if match:
        return match.group(1), image[match.end():]
    # Bare base64: PNG payloads start with the encoded signature
    return ("image/png" if image.startswith("iVBOR") else "image/jpeg"), image


class AnthropicClient:
    """Calls Claude through the anthropic SDK."""

    provider = "anthropic"

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.client = Anthropic(api_key=settings.anthropic_api_key, timeout=settings.provider_timeout_seconds)
        self.model = settings.anthropic_model
        self.max_tokens = settings.anthropic_max_tokens
        self.temperature = settings.anthropic_temperature

    @staticmethod
    def _content_blocks(content: Any) -> str | list[dict[str, Any]]:
        if isinstance(content, str):
            return content
        blocks: list[dict[str, Any]] = []
        for part in content or []:
            if part.get("type") == "image" and part.get("image"):
                media_type, data = _split_data_uri(part["image"])
                blocks.append(
                    {"type": "image", "source": {"type": "base64", "media_type": media_type, "data": data}}
                )
            elif part.get("text"):
                blocks.append({"type": "text", "text": part["text"]})
        return blocks

    def build_request(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        system_parts = []
        conversation = []
        for message in messages:
            if message.get("role") == "system":
                system_parts.append(message.get("content") or "")
            else:
                conversation.append(
                    {"role": message.get("role", "user"), "content": self._content_blocks(message.get("content"))}
                )

        request_payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": conversation,
        }
        if system_parts:
            request_payload["system"] = "\n\n".join(system_parts)
        return request_payload

    def generate_text(self, messages: list[dict[str, Any]]) -> str:
        try:
            response = self.client.messages.create(**self.build_request(messages))
        except anthropic.APIStatusError as err:
            logger.exception("Claude request failed with status %s", err.status_code)
            raise TransportError(self.provider, str(err), err.status_code) from err
        except anthropic.APIError as err:
            logger.exception("Claude request failed")
            raise TransportError(self.provider, str(err)) from err

        text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
        if not text:
            raise TransportError(self.provider, "Claude returned no text content")
        return text


class ToolkitClient:
    """Posts the role-tagged messages to the hosted text toolkit endpoint."""

    provider = "toolkit"

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.url = settings.toolkit_url
        self.timeout = settings.provider_timeout_seconds

    def generate_text(self, messages: list[dict[str, Any]]) -> str:
        try:
            response = httpx.post(self.url, json={"messages": messages}, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as err:
            status = err.response.status_code
            detail = (err.response.text or "").strip()[:220]
            raise TransportError(
                self.provider,
                f"Toolkit request failed (status={status}): {detail or 'no response body'}",
                status,
            ) from err
        except httpx.HTTPError as err:
            raise TransportError(self.provider, f"Toolkit request failed: {err}") from err

        try:
            data = response.json()
        except ValueError as err:
            raise TransportError(self.provider, "Toolkit returned a non-JSON body", response.status_code) from err
        completion = data.get("completion") if isinstance(data, dict) else None
        if not isinstance(completion, str):
            raise TransportError(self.provider, "Toolkit response has no completion", response.status_code)
        return completion


def get_ai_client(settings: Settings | None = None) -> AIClient:
    settings = settings or get_settings()
    if settings.ai_provider == "toolkit":
        return ToolkitClient(settings)
    return AnthropicClient(settings)


def load_prompt_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.debug("Prompt config %s not found, using built-in prompts", path)
        return {}
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


@lru_cache()
def _system_prompts(path: Path) -> dict[str, str]:
    configured = load_prompt_config(path).get("system_prompts") or {}
    prompts = dict(FALLBACK_SYSTEM_PROMPTS)
    prompts.update({key: str(value).strip() for key, value in configured.items() if value})
    return prompts


def system_prompt(domain: str, path: Path | None = None) -> str:
    """System prompt for ``domain`` from the YAML config or the built-in fallback."""

    if path is None:
        path = get_settings().prompt_config_path
    return _system_prompts(Path(path)).get(domain, FALLBACK_SYSTEM_PROMPTS["physique"])
