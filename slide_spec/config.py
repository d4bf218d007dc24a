"""Environment-backed settings for the producer transport."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

__all__ = ["ProducerSettings", "debug_enabled", "debug_history_size"]

REQUIRED_VARS = (
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_DEPLOYMENT_NAME",
)
DEFAULT_API_VERSION = "2024-10-21"
DEFAULT_DEBUG_HISTORY = 8


@dataclass(frozen=True)
class ProducerSettings:
    """Connection settings for an Azure OpenAI chat-completions deployment."""

    endpoint: str
    api_key: str
    deployment: str
    api_version: str = DEFAULT_API_VERSION

    @classmethod
    def missing_vars(cls, environ: Optional[Mapping[str, str]] = None) -> list[str]:
        env = os.environ if environ is None else environ
        return [name for name in REQUIRED_VARS if not (env.get(name) or "").strip()]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Optional["ProducerSettings"]:
        """Build settings from the environment, or return ``None`` when incomplete."""
        env = os.environ if environ is None else environ
        if cls.missing_vars(env):
            return None
        return cls(
            endpoint=env["AZURE_OPENAI_ENDPOINT"].strip(),
            api_key=env["AZURE_OPENAI_API_KEY"].strip(),
            deployment=env["AZURE_OPENAI_DEPLOYMENT_NAME"].strip(),
            api_version=(env.get("OPENAI_API_VERSION") or DEFAULT_API_VERSION).strip(),
        )

    @property
    def chat_completions_url(self) -> str:
        endpoint = self.endpoint.rstrip("/")
        return (
            f"{endpoint}/openai/deployments/{quote(self.deployment, safe='')}"
            f"/chat/completions?api-version={quote(self.api_version, safe='')}"
        )


def debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get("SLIDES_DEBUG") == "1"


def debug_history_size(environ: Optional[Mapping[str, str]] = None) -> int:
    env = os.environ if environ is None else environ
    try:
        return max(1, int(env.get("SLIDES_DEBUG_HISTORY", DEFAULT_DEBUG_HISTORY)))
    except ValueError:
        return DEFAULT_DEBUG_HISTORY
