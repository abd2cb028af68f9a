"""Unit tests for the text generation client (provider calls mocked)."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from project50.services import llm_service


def _client_returning(*results):
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=list(results))
    return client


def _response(text):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


@pytest.mark.asyncio
async def test_disabled_generation_raises(monkeypatch):
    monkeypatch.setattr(llm_service.settings, "LLM_ENABLED", False)
    with pytest.raises(RuntimeError):
        await llm_service.generate_text("hello")


@pytest.mark.asyncio
async def test_generate_text_passes_system_prompt(monkeypatch):
    monkeypatch.setattr(llm_service.settings, "LLM_ENABLED", True)
    client = _client_returning(_response("  Stay hard.  "))
    with patch.object(llm_service, "get_client", return_value=client):
        text = await llm_service.generate_text("motivate me", system="You are a sergeant.")

    assert text == "Stay hard."
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["system"] == "You are a sergeant."
    assert kwargs["messages"] == [{"role": "user", "content": "motivate me"}]


@pytest.mark.asyncio
async def test_generate_text_retries_then_gives_up(monkeypatch):
    monkeypatch.setattr(llm_service.settings, "LLM_ENABLED", True)
    client = _client_returning(RuntimeError("overloaded"), _response(""))
    with (
        patch.object(llm_service, "get_client", return_value=client),
        patch("project50.services.llm_service.asyncio.sleep", new_callable=AsyncMock),
    ):
        with pytest.raises(RuntimeError):
            await llm_service.generate_text("hello", retries=2)
    assert client.messages.create.await_count == 2


@pytest.mark.asyncio
async def test_generate_text_recovers_on_retry(monkeypatch):
    monkeypatch.setattr(llm_service.settings, "LLM_ENABLED", True)
    client = _client_returning(RuntimeError("timeout"), _response("Keep going."))
    with (
        patch.object(llm_service, "get_client", return_value=client),
        patch("project50.services.llm_service.asyncio.sleep", new_callable=AsyncMock),
    ):
        assert await llm_service.generate_text("hello") == "Keep going."
