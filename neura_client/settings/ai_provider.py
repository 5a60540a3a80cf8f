"""
AI Provider Settings
Read, change and test the AI provider used for insight generation.
"""

import logging
from typing import Optional

from neura_client.core.http import ApiClient
from neura_client.settings.schemas import (
    AIProviderConfig,
    AIProviderUpdateRequest,
    TestConnectionResponse,
)

logger = logging.getLogger(__name__)


# Known models for each provider
PROVIDER_MODELS: dict[str, list[str]] = {
    "openai": ["gpt-4o", "gpt-4o-mini", "gpt-4", "gpt-5"],
    "anthropic": [
        "claude-sonnet-4-20250514",
        "claude-sonnet-4-5-20250929",
        "claude-opus-4-5-20251101",
        "claude-haiku-4-5-20251001",
    ],
    "gemini": ["gemini-2.5-flash", "gemini-2.5-pro", "gemini-3-flash-preview", "gemini-3-pro-preview"],
}

PROVIDER_LABELS: dict[str, str] = {
    "openai": "OpenAI",
    "anthropic": "Claude (Anthropic)",
    "gemini": "Gemini (Google)",
}


def default_model(provider: str) -> Optional[str]:
    models = PROVIDER_MODELS.get(provider)
    return models[0] if models else None


class AIProviderService:
    CONFIG_PATH = "/settings/ai-provider"
    TEST_PATH = "/settings/ai-provider/test"

    def __init__(self, api: ApiClient):
        self.api = api

    async def get_config(self) -> AIProviderConfig:
        data = await self.api.get(self.CONFIG_PATH)
        return AIProviderConfig.model_validate(data)

    async def update_config(
        self,
        provider: str,
        api_key: str,
        model: Optional[str] = None,
        temperature: float = 0.1,
        top_p: float = 1.0,
    ) -> AIProviderConfig:
        """
        Save a provider configuration.

        The API key is required and is never returned by the backend.

        Raises:
            ValueError: API key missing or parameters out of range
            NeuraApiError: Request failed
        """
        if not api_key or not api_key.strip():
            raise ValueError("API key is required")

        request = AIProviderUpdateRequest(
            provider=provider,
            api_key=api_key.strip(),
            model=model or None,
            temperature=temperature,
            top_p=top_p,
        )
        data = await self.api.put(self.CONFIG_PATH, json=request.model_dump())
        logger.info("AI provider set to %s (model=%s)", provider, request.model)
        return AIProviderConfig.model_validate(data)

    async def test_connection(self) -> TestConnectionResponse:
        data = await self.api.post(self.TEST_PATH)
        return TestConnectionResponse.model_validate(data)
