"""Account settings and AI provider configuration."""

from neura_client.settings.ai_provider import AIProviderService
from neura_client.settings.store import SettingsStore

__all__ = ["AIProviderService", "SettingsStore"]
