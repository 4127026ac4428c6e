"""Shared orchestration for the per-domain analysis services."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, ClassVar

from app.config import Settings, get_settings
from app.models.records import DomainRecord
from app.services.ai_client import AIClient, get_ai_client, system_prompt
from app.services.recovery_pipeline import Domain, recover_record


logger = logging.getLogger(__name__)


class DomainAnalyzer:
    """Build prompt, call the provider, recover a validated record.

    Provider failures (:class:`TransportError`) and recovery failures
    (:class:`RecoveryError`) propagate to the caller unchanged; nothing is
    retried here.
    """

    domain: ClassVar[Domain]

    def __init__(self, client: AIClient | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or get_ai_client(self.settings)
        self.prefix_chars = self.settings.diagnostic_prefix_chars

    def build_prompt(self, request: Any) -> str:
        raise NotImplementedError

    def build_messages(self, request: Any) -> list[dict[str, Any]]:
        return [
            {"role": "system", "content": system_prompt(self.domain.value, self.settings.prompt_config_path)},
            {"role": "user", "content": self.build_prompt(request)},
        ]

    async def complete(self, messages: list[dict[str, Any]]) -> str:
        # Provider clients are synchronous
        return await asyncio.to_thread(self.client.generate_text, messages)

    def recover(self, raw: str, request: Any = None) -> DomainRecord:
        return recover_record(raw, self.domain, request, self.prefix_chars)

    async def analyze(self, request: Any) -> DomainRecord:
        logger.info("Starting %s analysis", self.domain.value)
        raw = await self.complete(self.build_messages(request))
        logger.debug("Provider returned %d characters for %s", len(raw), self.domain.value)
        record = self.recover(raw, request)
        logger.info("Completed %s analysis", self.domain.value)
        return record
