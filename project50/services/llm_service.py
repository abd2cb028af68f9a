"""Text generation on the Anthropic messages API.

The challenge engine never depends on this module. Every call can fail, so
callers keep a static fallback at hand (see motivation_service).
"""

import asyncio
import logging
from typing import Optional

from anthropic import AsyncAnthropic

from project50.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

_semaphore = asyncio.Semaphore(settings.LLM_MAX_CONCURRENCY)

_client: Optional[AsyncAnthropic] = None


def get_client() -> AsyncAnthropic:
    global _client
    if _client is None:
        _client = AsyncAnthropic(
            api_key=settings.ANTHROPIC_API_KEY,
            base_url=settings.ANTHROPIC_BASE_URL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )
    return _client


def _response_text(response) -> str:
    parts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
    return "".join(parts).strip()


async def generate_text(
    prompt: str,
    system: Optional[str] = None,
    temperature: float = 0.9,
    max_tokens: int = 300,
    retries: int = 2,
) -> str:
    """One short completion for ``prompt``.

    Raises RuntimeError when generation is switched off or every attempt failed.
    """
    if not settings.LLM_ENABLED:
        raise RuntimeError("text generation is disabled (LLM_ENABLED=false)")

    request = {
        "model": settings.ANTHROPIC_MODEL,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": [{"role": "user", "content": prompt}],
    }
    if system:
        request["system"] = system

    last_exc: Optional[Exception] = None
    for attempt in range(1, retries + 1):
        try:
            async with _semaphore:
                response = await get_client().messages.create(**request)
            text = _response_text(response)
            if not text:
                raise ValueError("model returned no text")
            return text
        except Exception as exc:
            logger.warning("Text generation attempt %d/%d failed: %s", attempt, retries, exc)
            last_exc = exc
            if attempt < retries:
                await asyncio.sleep(2 ** (attempt - 1))

    raise RuntimeError(f"text generation failed after {retries} attempts: {last_exc}")
