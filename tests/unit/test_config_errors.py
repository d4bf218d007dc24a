"""Test environment settings and the error-to-status mapping."""

import pytest

from slide_spec.config import ProducerSettings, debug_enabled, debug_history_size
from slide_spec.errors import (
    InvalidConversationError,
    InvalidDocumentError,
    ProducerNotConfiguredError,
    SlideSpecError,
    UpstreamError,
    status_for,
    truncate,
)


ENV = {
    "AZURE_OPENAI_ENDPOINT": " https://res.openai.azure.com/ ",
    "AZURE_OPENAI_API_KEY": "k",
    "AZURE_OPENAI_DEPLOYMENT_NAME": "slides",
}


def test_settings_from_env():
    settings = ProducerSettings.from_env(ENV)
    assert settings.endpoint == "https://res.openai.azure.com/"
    assert settings.api_version == "2024-10-21"
    assert settings.chat_completions_url == (
        "https://res.openai.azure.com/openai/deployments/slides/chat/completions?api-version=2024-10-21"
    )


def test_settings_api_version_override():
    settings = ProducerSettings.from_env(dict(ENV, OPENAI_API_VERSION="2025-01-01-preview"))
    assert settings.chat_completions_url.endswith("api-version=2025-01-01-preview")


def test_missing_vars_are_listed():
    env = dict(ENV, AZURE_OPENAI_API_KEY="  ")
    del env["AZURE_OPENAI_DEPLOYMENT_NAME"]
    assert ProducerSettings.missing_vars(env) == ["AZURE_OPENAI_API_KEY", "AZURE_OPENAI_DEPLOYMENT_NAME"]
    assert ProducerSettings.from_env(env) is None


def test_debug_flags():
    assert debug_enabled({"SLIDES_DEBUG": "1"})
    assert not debug_enabled({"SLIDES_DEBUG": "true"})
    assert not debug_enabled({})
    assert debug_history_size({}) == 8
    assert debug_history_size({"SLIDES_DEBUG_HISTORY": "3"}) == 3
    assert debug_history_size({"SLIDES_DEBUG_HISTORY": "0"}) == 1
    assert debug_history_size({"SLIDES_DEBUG_HISTORY": "lots"}) == 8


def test_truncate():
    assert truncate("abc", 5) == "abc"
    assert truncate("abcdef", 3) == "abc"


@pytest.mark.parametrize(
    "exc,status",
    [
        (InvalidDocumentError("deck", "slides: Field required"), 422),
        (ProducerNotConfiguredError(["AZURE_OPENAI_API_KEY"]), 503),
        (UpstreamError(429, "slow down"), 429),
        (UpstreamError(302, "moved"), 500),
        (InvalidConversationError(0, "role must be one of user, assistant"), 400),
        (SlideSpecError("boom"), 500),
        (RuntimeError("boom"), 500),
    ],
)
def test_status_for(exc, status):
    assert status_for(exc) == status


def test_not_configured_message_names_variables():
    exc = ProducerNotConfiguredError(["AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY"])
    assert "AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_API_KEY" in str(exc)
